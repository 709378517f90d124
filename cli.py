# cli.py
import argparse
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle
from rich import box, print_json
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from sdk.shopclient import ShopClient

console = Console()
c = ShopClient(base_url=os.getenv("SHOP_URL", "http://127.0.0.1:5000"))

product_cache: List[Dict[str, Any]] = []
user_cache = set()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
})


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(title="📦 Products", box=box.ROUNDED, header_style="bold cyan", show_lines=True)
    table.add_column("ID", style="dim", width=26)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=8)

    for p in products:
        stock = p.get("stock", 0)
        style = "red" if stock == 0 else ""
        table.add_row(p.get("_id", "N/A"), p.get("name", "N/A"), f"{p.get('price', 0):.2f}",
                      f"[{style}]{stock}[/{style}]" if style else str(stock))
    console.print(table)


def show_cart(cart: Dict[str, Any]):
    items = cart.get("items", [])
    title = f"🛒 Cart - {cart.get('userId', '?')} - Total: {cart.get('total', 0):.2f}"
    if not items:
        console.print(Panel("Cart is empty", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=30)
    table.add_column("Qty", justify="right", width=8)
    table.add_column("Price", justify="right", width=12)
    table.add_column("Subtotal", justify="right", width=12)

    for it in items:
        if it.get("available"):
            table.add_row(it["product"]["name"], str(it["quantity"]), f"{it['product']['price']:.2f}",
                          f"{it['lineTotal']:.2f}")
        else:
            table.add_row(f"[red]Missing product: {it.get('productId')}[/red]", str(it["quantity"]), "-", "-")
    console.print(Panel(table, title=title, border_style="blue"))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def _error_text(e: Exception) -> str:
    if isinstance(e, requests.exceptions.HTTPError) and e.response is not None:
        try:
            body = e.response.json()
        except ValueError:
            return f"HTTP {e.response.status_code}"
        if "errors" in body:
            return "; ".join(err.get("msg", "?") for err in body["errors"])
        return body.get("error", str(body))
    return str(e)


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Call fn with a spinner. Errors are shown and turned into None.
    """
    try:
        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
                      transient=True) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)
    except requests.exceptions.RequestException as e:
        console.print(show_status(f"Error: {_error_text(e)}", False))
        return None

    if success_msg:
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    ids = [p.get("_id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_user_completer():
    return WordCompleter(list(user_cache), ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_float(message: str, default: float = 10.0) -> float:
    while True:
        raw = Prompt.ask(message, default=str(default))
        try:
            return float(raw)
        except ValueError:
            console.print("[red]Please enter a valid number.[/red]")


def create_header():
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return Panel(f"🛍️ [bold blue]shopfront[/bold blue]  {c.base_url}  [dim]{now}[/dim]", style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global product_cache

    console.clear()
    console.print(create_header())
    product_cache = try_api(c.list_products) or []

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=26)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=26)
        for row in [
            ("1", "📦 List products", "6", "🔑 Login"),
            ("2", "ℹ️ Get product", "7", "🛒 Add to cart"),
            ("3", "➕ Create product", "8", "🛒 View cart"),
            ("4", "✏️ Update product", "9", "✅ Purchase cart"),
            ("5", "🗑️ Delete product", "10", "🩺 Health"),
            ("", "", "q", "👋 Quit"),
        ]:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 11)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded")
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "2":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            resp = try_api(c.get_product, pid)
            if resp:
                show_products([resp])

        elif choice in ("3", "4"):
            pid = None
            if choice == "4":
                pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            name = prompt_with_autocomplete("Name")
            price = ask_float("Price", default=10.0)
            stock = IntPrompt.ask("Stock", default=1)
            if pid:
                resp = try_api(c.update_product, pid, name, price, stock, success_msg=f"Product '{name}' updated")
            else:
                resp = try_api(c.create_product, name, price, stock, success_msg=f"Product '{name}' created")
            if resp:
                show_products([resp["product"]])
                product_cache = []

        elif choice == "5":
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            if Confirm.ask(f"[red]Delete {pid}?[/red]"):
                try_api(c.delete_product, pid, success_msg="Product deleted")
                product_cache = []

        elif choice == "6":
            username = prompt_with_autocomplete("Username", completer=get_user_completer())
            password = Prompt.ask("Password", password=True)
            resp = try_api(c.login, username, password)
            if resp:
                user_cache.add(username)
                console.print(show_status(f"Logged in as {username} ({resp['role']})"))

        elif choice == "7":
            user_id = prompt_with_autocomplete("User ID", completer=get_user_completer())
            user_cache.add(user_id)
            pid = prompt_with_autocomplete("Product ID", completer=get_product_completer())
            qty = IntPrompt.ask("Quantity", default=1)
            if try_api(c.add_to_cart, user_id, pid, qty, success_msg="Added to cart") is not None:
                cart = try_api(c.view_cart, user_id)
                if cart:
                    show_cart(cart)

        elif choice == "8":
            user_id = prompt_with_autocomplete("User ID", completer=get_user_completer())
            cart = try_api(c.view_cart, user_id)
            if cart:
                show_cart(cart)

        elif choice == "9":
            user_id = prompt_with_autocomplete("User ID", completer=get_user_completer())
            resp = try_api(c.purchase, user_id)
            if resp and resp["ok"]:
                console.print(Panel.fit(f"[green]{resp['message']}[/green]", title="✅ Purchase"))
            elif resp:
                console.print(Panel.fit(f"[red]{resp['error']}[/red]", title="❌ Purchase failed"))

        elif choice == "10":
            resp = try_api(c.health)
            if resp:
                print_json(data=resp)

        elif choice.lower() in ("q", "quit", "exit"):
            console.print(Panel.fit("[bold green]Bye! 👋[/bold green]"))
            return

        console.print()
        console.rule(style="dim")


# ---------------------------
# One-shot commands
# ---------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="shopfront CLI (no command: interactive menu)")
    parser.add_argument("--url", help="API base URL (default: $SHOP_URL or http://127.0.0.1:5000)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list-products", help="List all products")

    gp = sub.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True)

    cp = sub.add_parser("create-product", help="Create a product")
    cp.add_argument("--name", required=True)
    cp.add_argument("--price", type=float, required=True)
    cp.add_argument("--stock", type=int, required=True)

    up = sub.add_parser("update-product", help="Replace a product's fields")
    up.add_argument("--product-id", required=True)
    up.add_argument("--name", required=True)
    up.add_argument("--price", type=float, required=True)
    up.add_argument("--stock", type=int, required=True)

    dp = sub.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", required=True)

    lg = sub.add_parser("login", help="Check credentials")
    lg.add_argument("--username", required=True)
    lg.add_argument("--password", required=True)

    add = sub.add_parser("add-to-cart", help="Add a line to a user's cart")
    add.add_argument("--user-id", required=True)
    add.add_argument("--product-id", required=True)
    add.add_argument("--qty", type=int, default=1)

    vc = sub.add_parser("view-cart", help="View a user's cart")
    vc.add_argument("--user-id", required=True)

    pc = sub.add_parser("purchase", help="Settle a user's cart")
    pc.add_argument("--user-id", required=True)

    sub.add_parser("health", help="Check the API and its store")
    return parser


def run_command(args) -> Any:
    if args.command == "list-products":
        return c.list_products()
    if args.command == "get-product":
        return c.get_product(args.product_id)
    if args.command == "create-product":
        return c.create_product(args.name, args.price, args.stock)
    if args.command == "update-product":
        return c.update_product(args.product_id, args.name, args.price, args.stock)
    if args.command == "delete-product":
        return c.delete_product(args.product_id)
    if args.command == "login":
        return c.login(args.username, args.password)
    if args.command == "add-to-cart":
        return c.add_to_cart(args.user_id, args.product_id, args.qty)
    if args.command == "view-cart":
        return c.view_cart(args.user_id)
    if args.command == "purchase":
        return c.purchase(args.user_id)
    if args.command == "health":
        return c.health()
    raise ValueError(f"unknown command: {args.command}")


def main(argv: Optional[List[str]] = None):
    global c
    args = build_parser().parse_args(argv)
    if args.url:
        c = ShopClient(base_url=args.url)

    if args.command is None:
        try:
            menu()
        except KeyboardInterrupt:
            console.print("\n\n[bold red]Interrupted by user[/bold red]")
            sys.exit(1)
        return

    try:
        print_json(data=run_command(args))
    except requests.exceptions.RequestException as e:
        console.print(f"[bold red]Error:[/bold red] {_error_text(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
