import threading

import pytest

from ourgroceries import OurGroceriesClient
from ourgroceries.errors import (
    InvalidArgument,
    InvalidLogin,
    MalformedResponse,
    PreconditionNotReady,
    Unreachable,
)
from ourgroceries.models import NewListItem
from ourgroceries.session import LoginState, Session

from conftest import NO_CATEGORY_HTML, PASSWORD, USERNAME, FakeTransport, last_command, reply_json


class TestLoginOnDemand:

    def test_first_dispatch_logs_in_once(self, client, transport):
        client.dispatch("getOverview")
        client.dispatch("getOverview")
        assert transport.sign_in_count == 1
        assert transport.commands == [
            {"command": "getOverview", "teamId": "T123"},
            {"command": "getOverview", "teamId": "T123"},
        ]

    def test_session_populated_after_dispatch(self, client):
        assert client.session == Session.empty()
        client.dispatch("getOverview")
        assert client.logged_in
        assert client.team_id == "T123"
        assert client.master_list_id == "M99"
        assert client.category_list_id == "C7"
        assert client.login_state is LoginState.LOGGED_IN

    def test_failed_login_leaves_session_empty(self):
        transport = FakeTransport(set_cookie=False)
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        with pytest.raises(InvalidLogin):
            client.dispatch("getOverview")
        assert client.session == Session.empty()
        assert transport.commands == []

    def test_failed_extraction_leaves_session_empty(self):
        transport = FakeTransport(page='g_teamId = "T123";')
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        with pytest.raises(InvalidLogin):
            client.get_my_lists()
        assert client.session == Session.empty()

    def test_login_retried_on_next_call_after_failure(self):
        transport = FakeTransport(set_cookie=False)
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        with pytest.raises(InvalidLogin):
            client.dispatch("getOverview")
        transport.set_cookie = True
        client.dispatch("getOverview")
        assert transport.sign_in_count == 2
        assert client.logged_in

    def test_explicit_login_forces_new_sign_in(self, logged_in_client, transport):
        logged_in_client.login()
        assert transport.sign_in_count == 2

    def test_concurrent_dispatch_signs_in_once(self):
        transport = FakeTransport(sign_in_delay=0.1)
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        errors = []

        def worker():
            try:
                client.dispatch("getOverview")
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert errors == []
        assert transport.sign_in_count == 1
        assert len(transport.commands) == 4
        assert all(cmd["teamId"] == "T123" for cmd in transport.commands)

    def test_concurrent_failed_login_signs_in_once(self):
        transport = FakeTransport(set_cookie=False, sign_in_delay=0.1)
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        errors = []

        def worker():
            try:
                client.dispatch("getOverview")
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert transport.sign_in_count == 1
        assert len(errors) == 4
        assert all(isinstance(e, InvalidLogin) for e in errors)
        assert transport.commands == []
        assert client.session == Session.empty()

    def test_failed_relogin_keeps_logged_in_state(self, logged_in_client, transport):
        transport.cookies.clear()
        transport.set_cookie = False
        with pytest.raises(InvalidLogin):
            logged_in_client.login()
        assert logged_in_client.logged_in
        assert logged_in_client.login_state is LoginState.LOGGED_IN
        assert logged_in_client.team_id == "T123"


class TestDispatch:

    def test_caller_params_win(self, client, transport):
        client.dispatch("getCategoryList", {"teamId": "OTHER", "extra": 1})
        assert last_command(transport) == {"command": "getCategoryList", "teamId": "OTHER", "extra": 1}

    def test_posts_to_command_endpoint(self, client, transport):
        client.dispatch("getOverview")
        assert transport.command_urls == ["https://www.ourgroceries.com/your-lists/"]

    def test_base_url_override(self, transport):
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport, base_url="http://localhost:8080")
        client.dispatch("getOverview")
        assert transport.command_urls == ["http://localhost:8080/your-lists/"]

    def test_create_list_round_trip(self, client, transport):
        transport.replies["createList"] = reply_json({"listId": "L1"})
        doc = client.dispatch("createList", {"name": "Test List", "listType": "SHOPPING"})
        assert doc["listId"] == "L1"

    def test_returns_arrays_unchanged(self, client, transport):
        transport.replies["getOverview"] = reply_json([1, 2, 3])
        assert client.dispatch("getOverview") == [1, 2, 3]

    def test_malformed_response_keeps_session(self, logged_in_client, transport):
        transport.replies["getOverview"] = "<html>Oops</html>"
        before = logged_in_client.session
        with pytest.raises(MalformedResponse) as exc:
            logged_in_client.dispatch("getOverview")
        assert "Oops" in exc.value.details["body"]
        assert logged_in_client.session is before
        assert logged_in_client.logged_in

    def test_transport_failure_not_retried(self, logged_in_client, transport):
        transport.replies["getOverview"] = Unreachable("Connection error: reset")
        with pytest.raises(Unreachable):
            logged_in_client.dispatch("getOverview")
        assert len(transport.commands) == 1
        assert transport.sign_in_count == 1
        assert logged_in_client.logged_in

    def test_empty_command_rejected(self, client, transport):
        with pytest.raises(InvalidArgument):
            client.dispatch("")
        assert transport.sign_in_count == 0

    def test_constructor_validates_credentials(self, transport):
        with pytest.raises(InvalidArgument):
            OurGroceriesClient("", PASSWORD, transport=transport)


class TestListOperations:

    def test_get_my_lists(self, client, transport):
        transport.replies["getOverview"] = reply_json({"shoppingLists": [
            {"id": "L1", "name": "Test List", "versionId": "v1", "activeCount": 3},
            {"id": "L2", "name": "Hardware"},
        ]})
        lists = client.get_my_lists()
        assert [(entry.id, entry.name, entry.activeCount) for entry in lists] == [
            ("L1", "Test List", 3),
            ("L2", "Hardware", 0),
        ]

    def test_get_my_lists_without_key(self, client, transport):
        transport.replies["getOverview"] = reply_json({"somethingElse": []})
        assert client.get_my_lists() == []

    def test_get_my_lists_non_numeric_count(self, client, transport):
        transport.replies["getOverview"] = reply_json({"shoppingLists": [{"id": "a", "activeCount": "n/a"}]})
        with pytest.raises(MalformedResponse) as exc:
            client.get_my_lists()
        assert "n/a" in exc.value.message

    def test_get_list_items(self, client, transport):
        transport.replies["getList"] = reply_json({"list": {
            "id": "L1", "name": "Test List", "listType": "SHOPPING",
            "items": [{"id": "i1", "value": "Milk", "crossedOff": True, "categoryId": "cat1"}],
        }})
        data = client.get_list_items("L1")
        assert last_command(transport) == {"command": "getList", "teamId": "T123", "listId": "L1"}
        assert data.list.name == "Test List"
        assert data.list.items[0].value == "Milk"
        assert data.list.items[0].crossedOff is True

    def test_get_list_items_rejects_non_object(self, client, transport):
        transport.replies["getList"] = reply_json([])
        with pytest.raises(MalformedResponse):
            client.get_list_items("L1")

    def test_create_list_uppercases_type(self, client, transport):
        transport.replies["createList"] = reply_json({"listId": "L9"})
        assert client.create_list("Party", "recipes") == "L9"
        assert last_command(transport) == {
            "command": "createList", "teamId": "T123", "name": "Party", "listType": "RECIPES",
        }

    def test_create_list_without_list_id(self, client, transport):
        transport.replies["createList"] = reply_json({"ok": True})
        with pytest.raises(MalformedResponse):
            client.create_list("Party")

    def test_rename_list(self, client, transport):
        client.rename_list("L1", "New Name")
        assert last_command(transport) == {
            "command": "renameList", "teamId": "T123", "listId": "L1", "name": "New Name",
        }

    def test_delete_list(self, client, transport):
        client.delete_list("L1")
        assert last_command(transport) == {"command": "deleteList", "teamId": "T123", "listId": "L1"}

    def test_delete_all_crossed_off(self, client, transport):
        client.delete_all_crossed_off_from_list("L1")
        assert last_command(transport) == {
            "command": "deleteAllCrossedOffItems", "teamId": "T123", "listId": "L1",
        }

    def test_get_master_list(self, client, transport):
        transport.replies["getList"] = reply_json({"list": {"id": "M99"}})
        assert client.get_master_list() == {"list": {"id": "M99"}}
        assert last_command(transport)["listId"] == "M99"

    def test_get_category_list(self, client, transport):
        client.get_category_list()
        assert last_command(transport) == {"command": "getCategoryList", "teamId": "T123"}


class TestItemOperations:

    def test_toggle_crossed_off(self, client, transport):
        client.toggle_item_crossed_off("L1", "i1", cross_off=True)
        assert last_command(transport) == {
            "command": "setItemCrossedOff", "teamId": "T123",
            "listId": "L1", "itemId": "i1", "crossedOff": True,
        }

    def test_add_item_with_category(self, client, transport):
        client.add_item_to_list("L1", "Milk")
        assert last_command(transport) == {
            "command": "insertItem", "teamId": "T123",
            "listId": "L1", "value": "Milk", "note": "", "categoryId": "uncategorized",
        }

    def test_add_item_auto_category(self, client, transport):
        client.add_item_to_list("L1", "Milk", auto_category=True, note="2%")
        cmd = last_command(transport)
        assert "categoryId" not in cmd
        assert cmd["note"] == "2%"

    def test_add_items(self, client, transport):
        client.add_items_to_list("L1", [NewListItem("Milk"), NewListItem("Eggs", "cat1", "dozen")])
        assert last_command(transport) == {
            "command": "insertItems", "teamId": "T123",
            "items": [
                {"listId": "L1", "value": "Milk", "categoryId": None, "note": None},
                {"listId": "L1", "value": "Eggs", "categoryId": "cat1", "note": "dozen"},
            ],
        }

    def test_add_item_to_master_list(self, client, transport):
        client.add_item_to_master_list("Saffron", "cat1")
        assert last_command(transport) == {
            "command": "insertItem", "teamId": "T123",
            "listId": "M99", "value": "Saffron", "categoryId": "cat1",
        }

    def test_remove_item(self, client, transport):
        client.remove_item_from_list("L1", "i1")
        assert last_command(transport) == {
            "command": "deleteItem", "teamId": "T123", "listId": "L1", "itemId": "i1",
        }

    def test_change_item(self, client, transport):
        client.change_item_on_list("L1", "i1", "cat2", "Oat milk")
        assert last_command(transport) == {
            "command": "changeItemValue", "teamId": "T123",
            "itemId": "i1", "listId": "L1", "newValue": "Oat milk", "categoryId": "cat2",
        }


class TestCategoryOperations:

    def test_get_category_items(self, client, transport):
        transport.replies["getList"] = reply_json({"list": {"items": [
            {"id": "c1", "value": "Dairy"},
            {"id": "c2", "value": "Produce"},
        ]}})
        items = client.get_category_items()
        assert [c.value for c in items] == ["Dairy", "Produce"]
        assert last_command(transport)["listId"] == "C7"

    def test_create_category(self, client, transport):
        client.create_category("Snacks")
        assert last_command(transport) == {
            "command": "insertItem", "teamId": "T123", "value": "Snacks", "listId": "C7",
        }

    def test_category_operations_need_category_list(self):
        transport = FakeTransport(page=NO_CATEGORY_HTML)
        client = OurGroceriesClient(USERNAME, PASSWORD, transport=transport)
        with pytest.raises(PreconditionNotReady):
            client.get_category_items()
        with pytest.raises(PreconditionNotReady):
            client.create_category("Snacks")
        # login still succeeded and other commands keep working
        assert client.logged_in
        assert transport.sign_in_count == 1
        assert transport.commands == []
        client.get_category_list()
        assert len(transport.commands) == 1


def test_context_manager_closes_transport(transport):
    closed = []
    transport.close = lambda: closed.append(True)
    with OurGroceriesClient(USERNAME, PASSWORD, transport=transport):
        pass
    assert closed == [True]
