"""MCP Server for the fast food storefront."""

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl

from .appwrite_client import AppwriteClient
from .exceptions import FastFoodError
from .fastfood_client import FastFoodClient
from .models import AppSettings, AppwriteSettings, Cart, CheckoutSummary, MenuItem
from .security import ClientRateLimit, init_monitoring
from .storefront import MAX_ITEM_QUANTITY, Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("fastfood-mcp-server")

# Initialize server
app = Server("fastfood-mcp-server")

# Global state
storefront: Storefront


def text(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=message)]


def format_menu(items: list[MenuItem]) -> str:
    result_lines = [f"Found {len(items)} menu item(s):\n"]
    for i, item in enumerate(items, 1):
        result_lines.append(f"\n{i}. {item.name}")
        result_lines.append(f"   ID: {item.id}")
        result_lines.append(f"   Price: ${item.price:.2f}")
        if item.rating is not None:
            result_lines.append(f"   Rating: {item.rating}")
        if item.calories is not None:
            result_lines.append(f"   Calories: {item.calories}")
    return "\n".join(result_lines)


def format_cart(cart: Cart) -> str:
    if not cart.items:
        return "Your cart is empty"

    result_lines = [f"Your Cart ({cart.item_count} items):\n"]
    for i, item in enumerate(cart.items, 1):
        result_lines.append(f"\n{i}. {item.name}")
        result_lines.append(f"   Menu ID: {item.id}")
        if item.customizations:
            names = ", ".join(c.name for c in item.customizations)
            result_lines.append(f"   With: {names}")
        result_lines.append(f"   Price: ${item.price:.2f}")
        result_lines.append(f"   Quantity: {item.quantity}")
        result_lines.append(f"   Subtotal: ${item.subtotal:.2f}")

    summary = CheckoutSummary(total_items=cart.item_count, subtotal=cart.total)
    result_lines.append(f"\n{'=' * 50}")
    result_lines.append(f"Total Items ({summary.total_items}): ${summary.subtotal:.2f}")
    result_lines.append(f"Delivery Fee: ${summary.delivery_fee:.2f}")
    result_lines.append(f"Discount: - ${summary.discount:.2f}")
    result_lines.append(f"Total: ${summary.total:.2f}")
    return "\n".join(result_lines)


@app.list_resources()
async def list_resources() -> list[Resource]:
    """List available resources."""
    resources = [
        Resource(
            uri=AnyUrl("fastfood://cart"),
            name="Shopping Cart",
            mimeType="application/json",
            description="Current shopping cart contents",
        )
    ]

    if storefront.auth.is_authenticated:
        resources.append(
            Resource(
                uri=AnyUrl("fastfood://profile"),
                name="Profile",
                mimeType="application/json",
                description="Signed-in user's profile",
            )
        )

    return resources


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    """Read a resource by URI."""
    uri_str = str(uri)

    if uri_str == "fastfood://cart":
        return storefront.cart.get_state().model_dump_json(indent=2)

    elif uri_str == "fastfood://profile":
        if not storefront.auth.is_authenticated:
            return "Error: Not authenticated. Please sign in first."
        return storefront.auth.get_state().model_dump_json(indent=2, by_alias=True)

    raise ValueError(f"Unknown resource: {uri}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="fastfood_sign_in",
            description="Sign in with email and password",
            inputSchema={
                "type": "object",
                "properties": {
                    "email": {"type": "string", "description": "Account email address"},
                    "password": {"type": "string", "description": "Account password"},
                },
                "required": ["email", "password"],
            },
        ),
        Tool(
            name="fastfood_sign_up",
            description="Create an account and sign in",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Full name"},
                    "email": {"type": "string", "description": "Email address"},
                    "password": {
                        "type": "string",
                        "description": "At least 8 characters with uppercase, lowercase, number, and special character",
                    },
                },
                "required": ["name", "email", "password"],
            },
        ),
        Tool(
            name="fastfood_sign_out",
            description="Sign out and clear the local session",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="fastfood_get_profile",
            description="Show the signed-in user's profile",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="fastfood_get_categories",
            description="List menu categories",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="fastfood_search_menu",
            description="Search the menu by text and/or category",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search text (pizzas, burgers, ...)"},
                    "category": {
                        "type": "string",
                        "description": "Category name, or 'all' (default)",
                    },
                },
            },
        ),
        Tool(
            name="fastfood_get_menu_item",
            description="Show a menu item with its available customizations",
            inputSchema={
                "type": "object",
                "properties": {
                    "menu_id": {"type": "string", "description": "Menu item ID"},
                },
                "required": ["menu_id"],
            },
        ),
        Tool(
            name="fastfood_add_to_cart",
            description="Add a menu item, with optional customizations, to the cart",
            inputSchema={
                "type": "object",
                "properties": {
                    "menu_id": {"type": "string", "description": "Menu item ID"},
                    "customization_ids": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "IDs of selected customizations",
                    },
                    "quantity": {
                        "type": "integer",
                        "description": "Quantity to add (default: 1)",
                        "default": 1,
                        "minimum": 1,
                        "maximum": MAX_ITEM_QUANTITY,
                    },
                },
                "required": ["menu_id"],
            },
        ),
        Tool(
            name="fastfood_remove_from_cart",
            description="Remove every cart line for a menu item",
            inputSchema={
                "type": "object",
                "properties": {
                    "menu_id": {"type": "string", "description": "Menu item ID"},
                },
                "required": ["menu_id"],
            },
        ),
        Tool(
            name="fastfood_update_cart_quantity",
            description="Increase or decrease the quantity of the first cart line for a menu item",
            inputSchema={
                "type": "object",
                "properties": {
                    "menu_id": {"type": "string", "description": "Menu item ID"},
                    "direction": {
                        "type": "string",
                        "enum": ["increase", "decrease"],
                        "description": "Change the quantity by one",
                    },
                },
                "required": ["menu_id", "direction"],
            },
        ),
        Tool(
            name="fastfood_get_cart",
            description="Get current cart contents with payment summary",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="fastfood_clear_cart",
            description="Remove everything from the cart",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="fastfood_place_order",
            description="Place the order for the current cart (local confirmation, no payment)",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}
    try:
        if name == "fastfood_sign_in":
            state = await storefront.sign_in(arguments.get("email", ""), arguments.get("password", ""))
            if not state.is_authenticated:
                return text("Signed in, but no profile was found for this account.")
            return text(f"Successfully signed in as {state.user.name}")

        elif name == "fastfood_sign_up":
            state = await storefront.sign_up(
                arguments.get("name", ""), arguments.get("email", ""), arguments.get("password", "")
            )
            if not state.is_authenticated:
                return text("Account created, but signing in failed. Please sign in.")
            return text(f"Welcome, {state.user.name}! Your account is ready.")

        elif name == "fastfood_sign_out":
            await storefront.logout()
            return text("Successfully signed out")

        elif name == "fastfood_get_profile":
            user = storefront.auth.user
            if not storefront.auth.is_authenticated or not user:
                return text("Sign in to access your profile and order history")
            return text(f"Name: {user.name}\nEmail: {user.email}")

        elif name == "fastfood_get_categories":
            categories = await storefront.get_categories()
            if not categories:
                return text("No categories found")
            return text("\n".join(f"- {c.name}: {c.description}" for c in categories))

        elif name == "fastfood_search_menu":
            items = await storefront.search_menu(
                arguments.get("query", ""), arguments.get("category")
            )
            if not items:
                return text("No menu items found")
            return text(format_menu(items))

        elif name == "fastfood_get_menu_item":
            item, customizations = await storefront.get_menu_item(arguments["menu_id"])
            result_lines = [item.name, f"Price: ${item.price:.2f}"]
            if item.description:
                result_lines.append(item.description)
            if customizations:
                result_lines.append("\nCustomizations:")
                for c in customizations:
                    result_lines.append(f"- {c.name} (+${c.price:.2f}) ID: {c.id}")
            return text("\n".join(result_lines))

        elif name == "fastfood_add_to_cart":
            quantity = int(arguments.get("quantity", 1))
            cart = await storefront.add_to_cart(
                arguments["menu_id"], arguments.get("customization_ids", []), quantity
            )
            return text(f"Item added to cart! ({cart.item_count} items, ${cart.total:.2f})")

        elif name == "fastfood_remove_from_cart":
            storefront.cart.remove_item(arguments["menu_id"])
            return text(format_cart(storefront.cart.get_state()))

        elif name == "fastfood_update_cart_quantity":
            if arguments["direction"] == "increase":
                storefront.cart.increase_qty(arguments["menu_id"])
            else:
                storefront.cart.decrease_qty(arguments["menu_id"])
            return text(format_cart(storefront.cart.get_state()))

        elif name == "fastfood_get_cart":
            return text(format_cart(storefront.cart.get_state()))

        elif name == "fastfood_clear_cart":
            storefront.cart.clear_cart()
            return text("Your cart is empty")

        elif name == "fastfood_place_order":
            confirmation = storefront.place_order()
            return text(f"Order Placed! ${confirmation.total:.2f}\n{confirmation.message}")

        else:
            return text(f"Unknown tool: {name}")

    except FastFoodError as e:
        return text(f"Error: {e.message}")
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return text("Error: Something went wrong. Please try again later.")


def create_storefront() -> Storefront:
    """Build the storefront from environment configuration."""
    appwrite_settings = AppwriteSettings.from_env()
    settings = AppSettings.from_env()
    init_monitoring(settings)

    if settings.debug:
        logging.getLogger("fastfood_server").setLevel(logging.DEBUG)

    client = FastFoodClient(AppwriteClient(appwrite_settings))
    rate_limit = ClientRateLimit(
        settings.rate_limit_max_attempts, settings.rate_limit_window_minutes * 60
    )
    return Storefront(client, settings, rate_limit)


async def main() -> None:
    """Main entry point for the MCP server."""
    global storefront

    storefront = create_storefront()
    state = await storefront.start()
    logger.info(f"Session restored: {state.status}")

    logger.info("Starting Fast Food MCP Server...")

    from mcp.server.stdio import stdio_server

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options(),
            )
    finally:
        await storefront.client.appwrite.aclose()


if __name__ == "__main__":
    asyncio.run(main())
