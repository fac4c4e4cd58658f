"""Stand-in resource clients and payload builders for the tests."""
import asyncio

from bson import ObjectId

from admin_console.client import PagedResult

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse"


def order_payload(product_id=None, quantity=2, **fields):
    payload = {
        "items": [{"productId": str(product_id or ObjectId()), "productName": "Runner", "quantity": quantity, "unitPrice": 100}],
        "shippingAddress": {
            "fullName": "Rahim Uddin",
            "email": "rahim@example.com",
            "phone": "01711111111",
            "streetAddress": "12 Lake Road",
            "city": "Dhaka",
            "zipCode": "1207",
        },
        "payment": {"method": "cash_on_delivery"},
        "productsSubtotal": 100 * quantity,
        "shippingCost": 60,
    }
    payload.update(fields)
    return payload


def page_of(items, total_pages=1, page=1, page_limit=10):
    return PagedResult(items=list(items), total_pages=total_pages, current_page=page, page_limit=page_limit)


class RecordingClient:
    """Answers every call from `responses` and records it in `calls`.

    A response that is an exception is raised instead. `hooks` run just
    before the answer is returned, keyed by method name.
    """

    def __init__(self, resource, items=(), total_pages=1, page_limit=10):
        self.resource = resource
        self.calls = []
        self.hooks = {}
        self.responses = {"list": page_of(items, total_pages, page_limit=page_limit)}

    async def _answer(self, name, *args):
        self.calls.append((name,) + args)
        await asyncio.sleep(0)
        if name in self.hooks:
            self.hooks[name]()
        answer = self.responses.get(name)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def named(self, name):
        return [call for call in self.calls if call[0] == name]

    async def list(self, page=1, search=""):
        return await self._answer("list", page, search)

    async def create(self, payload):
        return await self._answer("create", payload)

    async def update(self, entity_id, payload, failure=None):
        return await self._answer("update", entity_id, payload)

    async def patch_status(self, entity_id, payload):
        return await self._answer("patch_status", entity_id, payload)

    async def remove(self, entity_id):
        return await self._answer("remove", entity_id)


class GatedClient:
    """List calls wait until the test resolves them, in whatever order it likes."""

    def __init__(self, resource):
        self.resource = resource
        self.pending = []

    async def list(self, page=1, search=""):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(((page, search), future))
        return await future

    def future_for(self, page=1, search=""):
        return next(f for key, f in self.pending if key == (page, search))

    async def wait_for_calls(self, count):
        for _ in range(100):
            if len(self.pending) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} list calls, saw {len(self.pending)}")
