#!/usr/bin/env python3
"""
Storefront Gateway Demo

Walks a customer session through the storefront APIs using the gateway
client, printing every response envelope:
- Registration and login (token stored in the session)
- Catalogue browsing and admin product management (multipart upload)
- Cart upsert, coupon application and line removal
- Error normalization (404, 401, unreachable service)

Start the mock services first with `python start_services.py`.

Usage:
    python demo.py [--mode=MODE]

Modes:
    all      - Run every demonstration (default)
    auth     - Registration and login
    catalog  - Products and coupons
    cart     - Cart and coupon flow
    errors   - Error normalization
"""

import argparse
import asyncio
import json
import logging
import uuid
from typing import Any, Dict, Optional

from colorama import Fore, Style, init

from models.dto import CartDetailsDto, CartDto, CartHeaderDto, LoginRequestDto, ProductDto, RegistrationRequestDto
from models.envelope import FilePart, RequestDescriptor, ResponseEnvelope
from services.config import ServiceUrls
from services.storefront import Storefront, create_storefront

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class StorefrontDemo:
    """Interactive walkthrough of the storefront gateway client."""

    def __init__(self, service_urls: ServiceUrls, admin_email: str, admin_password: str):
        """Initialize the demo."""
        self.setup_logging()
        self.service_urls = service_urls
        self.admin_email = admin_email
        self.admin_password = admin_password

        suffix = uuid.uuid4().hex[:8]
        self.customer = RegistrationRequestDto(
            email=f"customer.{suffix}@example.com",
            name="Demo Customer",
            phone_number="555-0100",
            password="Customer123*",
        )
        self.user_id: Optional[str] = None

    def setup_logging(self):
        """Setup logging for the demo."""
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        self.logger = logging.getLogger("storefront_demo")

    def print_banner(self, title: str, subtitle: str = ""):
        """Print formatted banner."""
        print("\n" + "=" * 80)
        print(f"{Fore.CYAN}{Style.BRIGHT}{title}")
        if subtitle:
            print(f"{Fore.CYAN}{subtitle}")
        print("=" * 80 + Style.RESET_ALL)

    def print_section(self, title: str):
        """Print section header."""
        print(f"\n{Fore.YELLOW}{Style.BRIGHT}{title}")
        print("-" * len(title) + Style.RESET_ALL)

    def print_envelope(self, label: str, envelope: ResponseEnvelope):
        """Print an envelope, green on success and red on failure."""
        color = Fore.GREEN if envelope.is_success else Fore.RED
        status = "OK" if envelope.is_success else "FAILED"
        print(f"{color}[{status}] {label}{Style.RESET_ALL}")
        if envelope.message:
            print(f"    message: {envelope.message}")
        if envelope.result is not None:
            print(f"    result:  {self._preview(envelope.result)}")

    @staticmethod
    def _preview(result: Any, limit: int = 300) -> str:
        text = json.dumps(result, default=str)
        return text if len(text) <= limit else text[:limit] + "..."

    async def demo_auth(self, storefront: Storefront) -> bool:
        """Register a customer and sign in."""
        self.print_section("Registration and login")

        registered = await storefront.auth.register(self.customer)
        self.print_envelope(f"register {self.customer.email}", registered)

        duplicate = await storefront.auth.register(self.customer)
        self.print_envelope("register the same email again", duplicate)

        wrong = await storefront.login(LoginRequestDto(user_name=self.customer.email, password="wrong"))
        self.print_envelope("login with a wrong password", wrong)

        signed_in = await storefront.login(
            LoginRequestDto(user_name=self.customer.email, password=self.customer.password)
        )
        self.print_envelope("login", signed_in)
        if signed_in.is_success:
            self.user_id = signed_in.result["user"]["id"]
        return registered.is_success and signed_in.is_success and storefront.is_authenticated

    async def demo_catalog(self, storefront: Storefront) -> bool:
        """Browse products and coupons, then manage the catalogue as admin."""
        self.print_section("Catalogue")

        products = await storefront.products.get_all_products()
        self.print_envelope("get all products", products)
        coupons = await storefront.coupons.get_all_coupons()
        self.print_envelope("get all coupons", coupons)
        coupon = await storefront.coupons.get_coupon("10OFF")
        self.print_envelope("get coupon 10OFF", coupon)

        forbidden = await storefront.products.delete_product(1)
        self.print_envelope("delete a product as customer", forbidden)

        async with create_storefront(self.service_urls) as admin:
            signed_in = await admin.login(LoginRequestDto(user_name=self.admin_email, password=self.admin_password))
            self.print_envelope("admin login", signed_in)

            created = await admin.products.create_product(
                ProductDto(
                    name="Demo Mug",
                    price=12.5,
                    category_name="Merchandise",
                    description="Ceramic mug",
                    image=FilePart(filename="mug.png", stream=b"\x89PNG demo image", content_type="image/png"),
                )
            )
            self.print_envelope("create product with image", created)

            if created.is_success:
                product = ProductDto.model_validate(created.result)
                product.price = 11.0
                updated = await admin.products.update_product(product)
                self.print_envelope("update product price", updated)
                deleted = await admin.products.delete_product(product.product_id)
                self.print_envelope("delete product", deleted)

        return products.is_success and coupons.is_success and not forbidden.is_success

    async def demo_cart(self, storefront: Storefront) -> bool:
        """Fill a cart, apply a coupon and remove a line."""
        self.print_section("Cart")
        if not self.user_id:
            self.print_envelope("cart demo needs a signed-in customer", ResponseEnvelope.failure("not signed in"))
            return False

        cart = CartDto(
            cart_header=CartHeaderDto(user_id=self.user_id),
            cart_details=[CartDetailsDto(product_id=1, count=2), CartDetailsDto(product_id=3, count=1)],
        )
        upserted = await storefront.cart.upsert_cart(cart)
        self.print_envelope("add two products", upserted)

        cart.cart_header.coupon_code = "10OFF"
        applied = await storefront.cart.apply_coupon(cart)
        self.print_envelope("apply coupon 10OFF", applied)

        current = await storefront.cart.get_cart_by_user_id(self.user_id)
        self.print_envelope("get cart", current)

        if current.is_success and current.result["cartDetails"]:
            line_id = current.result["cartDetails"][0]["cartDetailsId"]
            removed = await storefront.cart.remove_from_cart(line_id)
            self.print_envelope(f"remove line {line_id}", removed)

        removed_coupon = await storefront.cart.remove_coupon(cart)
        self.print_envelope("remove coupon", removed_coupon)
        return upserted.is_success and applied.is_success and current.is_success

    async def demo_errors(self, storefront: Storefront) -> bool:
        """Show how every failure becomes an envelope."""
        self.print_section("Error normalization")

        missing = await storefront.products.get_product_by_id(999999)
        self.print_envelope("unknown product (404)", missing)

        async with create_storefront(self.service_urls) as anonymous:
            unauthorized = await anonymous.products.get_all_products()
            self.print_envelope("products without a token (401)", unauthorized)

        unreachable = await storefront.base_service.send(RequestDescriptor(url="http://127.0.0.1:9/api/product"))
        self.print_envelope("unreachable service", unreachable)

        return not missing.is_success and not unauthorized.is_success and not unreachable.is_success


async def main():
    """Main demonstration entry point."""

    parser = argparse.ArgumentParser(description="Storefront Gateway Demo")
    parser.add_argument("--mode", choices=["all", "auth", "catalog", "cart", "errors"],
                        default="all", help="Demonstration mode")
    parser.add_argument("--auth-url", default="http://localhost:7002", help="Auth API URL")
    parser.add_argument("--coupon-url", default="http://localhost:7001", help="Coupon API URL")
    parser.add_argument("--product-url", default="http://localhost:7000", help="Product API URL")
    parser.add_argument("--cart-url", default="http://localhost:7003", help="ShoppingCart API URL")
    parser.add_argument("--admin-email", default="admin@example.com", help="Administrator login")
    parser.add_argument("--admin-password", default="Admin123*", help="Administrator password")

    args = parser.parse_args()

    service_urls = ServiceUrls(
        auth_api=args.auth_url,
        coupon_api=args.coupon_url,
        product_api=args.product_url,
        cart_api=args.cart_url,
    )
    demo = StorefrontDemo(service_urls, args.admin_email, args.admin_password)
    demo.print_banner("STOREFRONT GATEWAY DEMO", "Auth, Coupon, Product and ShoppingCart through one gateway")

    results: Dict[str, bool] = {}
    async with create_storefront(service_urls) as storefront:
        try:
            # Every other mode needs a signed-in customer
            results["auth"] = await demo.demo_auth(storefront)
            if args.mode in ("all", "catalog"):
                results["catalog"] = await demo.demo_catalog(storefront)
            if args.mode in ("all", "cart"):
                results["cart"] = await demo.demo_cart(storefront)
            if args.mode in ("all", "errors"):
                results["errors"] = await demo.demo_errors(storefront)
        except KeyboardInterrupt:
            print(f"{Fore.YELLOW}Demonstration interrupted by user{Style.RESET_ALL}")
            return 1

    demo.print_section("Summary")
    for name, passed in results.items():
        color = Fore.GREEN if passed else Fore.RED
        print(f"{color}{name:<10} {'passed' if passed else 'failed'}{Style.RESET_ALL}")

    return 0 if all(results.values()) else 1


if __name__ == "__main__":
    exit(asyncio.run(main()))
