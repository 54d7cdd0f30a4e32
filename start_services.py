#!/usr/bin/env python3
"""
Start all mock storefront APIs.

Runs the Product, Coupon, Auth and ShoppingCart mock services in one process,
each on its own port, so the gateway client and the demo have something to
talk to.
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List, Tuple

import uvicorn

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Service name -> (ASGI app path, default port)
SERVICES: Dict[str, Tuple[str, int]] = {
    "product": ("mock_services.product_api:app", 7000),
    "coupon": ("mock_services.coupon_api:app", 7001),
    "auth": ("mock_services.auth_api:app", 7002),
    "cart": ("mock_services.cart_api:app", 7003),
}


class ServiceManager:
    """Manages the uvicorn servers of the mock services."""

    def __init__(self, host: str = "127.0.0.1", port_offset: int = 0):
        self.host = host
        self.servers: List[Tuple[str, uvicorn.Server]] = []

        for name, (app_path, port) in SERVICES.items():
            config = uvicorn.Config(app_path, host=host, port=port + port_offset, log_level="info")
            self.servers.append((name, uvicorn.Server(config)))

    async def run_forever(self):
        """Serve every mock API until interrupted."""
        for name, server in self.servers:
            logger.info(f"Starting {name} API on http://{self.host}:{server.config.port}")

        try:
            await asyncio.gather(*(server.serve() for _, server in self.servers))
        finally:
            logger.info("All mock services stopped")

    def stop_all(self):
        """Ask every server to exit."""
        for _, server in self.servers:
            server.should_exit = True


async def main():
    """Main function to start and manage the mock services."""
    parser = argparse.ArgumentParser(description="Run the mock storefront APIs")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port-offset", type=int, default=0, help="Added to every default port")
    args = parser.parse_args()

    manager = ServiceManager(host=args.host, port_offset=args.port_offset)

    try:
        await manager.run_forever()
    except Exception as e:
        logger.error(f"Error in main: {e}")
        manager.stop_all()
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Goodbye!")
        sys.exit(0)
