#!/usr/bin/env python3
"""
Run one of the HTTP services with uvicorn.

    inspection-platform --service inspection-api          # port 3001
    inspection-platform --service report-service          # port 3002
    inspection-platform                                   # both routers, port 8000
"""
import argparse
import os

import uvicorn
from dotenv import load_dotenv

from .config import configure_logging, get_settings
from .main import ALL_SERVICES, DEFAULT_PORTS, ROUTERS, create_app


def main(argv=None):
    load_dotenv()

    parser = argparse.ArgumentParser(description="Inspection platform HTTP services")
    parser.add_argument("--service", choices=sorted(ROUTERS), default=ALL_SERVICES)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None, help="Defaults to PORT or the service's usual port")
    args = parser.parse_args(argv)

    port = args.port or int(os.environ.get("PORT", DEFAULT_PORTS[args.service]))

    settings = get_settings()
    configure_logging(settings)
    app = create_app(args.service, settings)

    print(f"{args.service} running on {args.host}:{port}")
    uvicorn.run(app, host=args.host, port=port)


if __name__ == "__main__":
    main()
