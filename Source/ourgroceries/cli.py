import argparse
import getpass
import json
import logging
from typing import Optional

from ourgroceries import OurGroceriesClient
from ourgroceries.errors import OurGroceriesError
from ourgroceries.logging_utils import crash_hint, install_excepthook, log_exception_context, setup_logging
from ourgroceries.utils import load_test_credentials, mask_email

DEFAULT_TEST_LIST = "Test List"


def _confirm(prompt: str, required: Optional[str] = None) -> bool:
    msg = f"{prompt} (y/N)" if not required else f"{prompt} (type {required} to confirm)"
    ans = input(msg + ": ").strip().lower()
    if required:
        return ans == required.lower()
    return ans in ("y", "yes")


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def run_smoke_noninteractive(client: Optional[OurGroceriesClient] = None,
                             list_name: str = DEFAULT_TEST_LIST) -> int:
    """Log in, create a list, read it back and add an item.

    Returns 0 on success, 1 when no credentials are available, 2 on a client error.
    """
    if client is None:
        creds = load_test_credentials()
        if not creds:
            print("No test credentials found in OURGROCERIES_USERNAME/OURGROCERIES_PASSWORD or .env/env_data.txt")
            return 1
        username, password = creds
        print(f"[INFO] Using test user: {mask_email(username)}")
        client = OurGroceriesClient(username, password)
    with client:
        try:
            print("[STEP] Login")
            client.login()
            print("[OK] Logged in")
            print(f"[STEP] Create list '{list_name}'")
            client.create_list(list_name)
            print("[STEP] Fetch lists")
            lists = client.get_my_lists()
            print(f"[OK] {len(lists)} list(s)")
            if client.category_list_id:
                print("[STEP] Fetch categories")
                categories = client.get_category_items()
                print(f"[OK] {len(categories)} categor(y/ies)")
            else:
                print("[WARN] Category list unavailable; skipping categories")
            test_list = next((entry for entry in lists if entry.name == list_name), None)
            if test_list is None:
                print(f"[FAIL] List '{list_name}' not found after creation")
                return 2
            print("[STEP] Fetch test list items")
            data = client.get_list_items(test_list.id)
            print(f"[OK] {len(data.list.items)} item(s)")
            if data.list.find_item("Milk") is None:
                print("[STEP] Add 'Milk'")
                client.add_item_to_list(test_list.id, "Milk")
            else:
                print("[SKIP] 'Milk' already on the list")
            print("[SUCCESS] Smoke validation completed.")
            return 0
        except OurGroceriesError as e:
            log_exception_context("Smoke validation failed")
            print(f"[FAIL] Smoke validation error: {e}")
            return 2


def _pick_list(client: OurGroceriesClient) -> Optional[str]:
    lists = client.get_my_lists()
    if not lists:
        print("No lists.")
        return None
    for i, entry in enumerate(lists, start=1):
        print(f"  {i}. {entry.name} ({entry.activeCount} active)")
    try:
        choice = int(input("Select list #: ").strip())
        return lists[choice - 1].id
    except (ValueError, IndexError):
        print("Invalid choice.")
        return None


def _pick_item(client: OurGroceriesClient, list_id: str) -> Optional[str]:
    items = client.get_list_items(list_id).list.items
    if not items:
        print("List is empty.")
        return None
    for i, item in enumerate(items, start=1):
        mark = "x" if item.crossedOff else " "
        print(f"  {i}. [{mark}] {item.value}")
    try:
        choice = int(input("Select item #: ").strip())
        return items[choice - 1].id
    except (ValueError, IndexError):
        print("Invalid choice.")
        return None


def run_interactive(client: OurGroceriesClient) -> None:
    menu_sections = [
        (
            "Lists",
            [
                ("1", "Show my lists"),
                ("2", "Show list items"),
                ("3", "Create list"),
                ("4", "Rename list"),
                ("5", "Delete list"),
                ("6", "Delete crossed-off items"),
            ],
        ),
        (
            "Items",
            [
                ("7", "Add item"),
                ("8", "Cross off / restore item"),
                ("9", "Remove item"),
            ],
        ),
        (
            "Categories & master list",
            [
                ("10", "Show categories"),
                ("11", "Create category"),
                ("12", "Show master list"),
                ("0", "Exit"),
            ],
        ),
    ]

    while True:
        print(f"\n<---- Commands ---->  [User: {mask_email(client.username)}]")
        for title, items in menu_sections:
            print(f"[{title}]")
            for k, v in items:
                print(f"  {k}: {v}")
        cmd = input("Command: ").strip().lower()

        try:
            if cmd == "0":
                print("Bye!")
                break
            elif cmd == "1":
                for entry in client.get_my_lists():
                    print(f"  {entry.name} ({entry.activeCount} active) id={entry.id}")
            elif cmd == "2":
                list_id = _pick_list(client)
                if list_id:
                    data = client.get_list_items(list_id)
                    for item in data.list.items:
                        mark = "x" if item.crossedOff else " "
                        print(f"  [{mark}] {item.value}")
            elif cmd == "3":
                name = input("List name: ").strip()
                list_type = input("List type (SHOPPING/RECIPES, default SHOPPING): ").strip() or "SHOPPING"
                if name:
                    print(f"Created list {client.create_list(name, list_type)}")
            elif cmd == "4":
                list_id = _pick_list(client)
                name = input("New name: ").strip() if list_id else ""
                if list_id and name:
                    client.rename_list(list_id, name)
                    print("Renamed.")
            elif cmd == "5":
                list_id = _pick_list(client)
                if list_id and _confirm("Delete this list?", required="delete"):
                    client.delete_list(list_id)
                    print("Deleted.")
            elif cmd == "6":
                list_id = _pick_list(client)
                if list_id and _confirm("Delete all crossed-off items?"):
                    client.delete_all_crossed_off_from_list(list_id)
                    print("Done.")
            elif cmd == "7":
                list_id = _pick_list(client)
                value = input("Item: ").strip() if list_id else ""
                if list_id and value:
                    note = input("Note (optional): ").strip() or None
                    client.add_item_to_list(list_id, value, auto_category=True, note=note)
                    print("Added.")
            elif cmd == "8":
                list_id = _pick_list(client)
                item_id = _pick_item(client, list_id) if list_id else None
                if list_id and item_id:
                    cross_off = _confirm("Cross off? (no restores the item)")
                    client.toggle_item_crossed_off(list_id, item_id, cross_off)
                    print("Updated.")
            elif cmd == "9":
                list_id = _pick_list(client)
                item_id = _pick_item(client, list_id) if list_id else None
                if list_id and item_id and _confirm("Remove this item?"):
                    client.remove_item_from_list(list_id, item_id)
                    print("Removed.")
            elif cmd == "10":
                for cat in client.get_category_items():
                    print(f"  {cat.value} id={cat.id}")
            elif cmd == "11":
                name = input("Category name: ").strip()
                if name:
                    client.create_category(name)
                    print("Created.")
            elif cmd == "12":
                _print_json(client.get_master_list())
            else:
                print("Unknown command")
        except OurGroceriesError as e:
            log_exception_context(f"Command {cmd} failed")
            print(f"[ERROR] {e}")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="OurGroceries client (sample CLI)")
    parser.add_argument("--noninteractive", action="store_true", help="Run smoke validation using .env credentials and exit")
    parser.add_argument("--username", "--u", "-u", help="Username (e-mail) for login")
    parser.add_argument("--password", "--p", "-p", help="Password for login")
    parser.add_argument("--list-name", default=DEFAULT_TEST_LIST, help="List used by the smoke run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging on the console")
    args = parser.parse_args(argv)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)
    install_excepthook()

    client: Optional[OurGroceriesClient] = None
    if args.username and args.password:
        client = OurGroceriesClient(args.username, args.password)

    if args.noninteractive:
        return run_smoke_noninteractive(client, args.list_name)

    if client is None:
        creds = load_test_credentials()
        if creds:
            username, password = creds
        else:
            username = args.username or input("E-mail: ").strip()
            password = args.password or getpass.getpass(f"Password for {username}: ")
        try:
            client = OurGroceriesClient(username, password)
        except OurGroceriesError as e:
            print(f"[ERROR] {e}")
            return 1
    with client:
        try:
            client.login()
        except OurGroceriesError as e:
            log_exception_context("Login failed")
            print(f"[ERROR] {e}")
            print(crash_hint())
            return 2
        print(f"Successfully logged in as: {mask_email(client.username)}")
        run_interactive(client)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
