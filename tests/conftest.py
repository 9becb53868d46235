import asyncio
from io import BytesIO

import pytest
from PIL import Image

import app as app_module
from badges.errors import RasterizationError
from badges.models import GuestIdentity
from badges.raster import Renderer
from badges.store import GuestStore
from database_setup import init_db

EVENT_ID = "evt12345-0000-4000-8000-000000000001"


def cairo_available():
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


requires_cairo = pytest.mark.skipif(not cairo_available(), reason="libcairo not installed")


def png_bytes(size=(200, 80)):
    buf = BytesIO()
    Image.new("RGB", size, "white").save(buf, format="PNG")
    return buf.getvalue()


class StubRenderer(Renderer):
    """Renders every markup to the same blank PNG."""

    def __init__(self):
        self.calls = []

    async def rasterize(self, markup):
        self.calls.append(markup)
        await asyncio.sleep(0)
        return png_bytes()


class FailingRenderer(Renderer):
    async def rasterize(self, markup):
        raise RasterizationError("no display")


@pytest.fixture
def ada():
    return GuestIdentity(
        id="g-1",
        badge_id="evt1234-1700000000000",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@x.com",
        phone="555-0100",
        event_name="Analytical Engines Summit",
    )


@pytest.fixture
def grace():
    return GuestIdentity(
        id="g-2",
        badge_id="evt1234-1700000000001",
        first_name="Grace",
        last_name="Hopper",
        email="grace@navy.mil",
        phone="555-0199",
        company="US Navy",
        job_title="Rear Admiral",
        event_name="Analytical Engines Summit",
    )


@pytest.fixture
def store(tmp_path):
    db_file = str(tmp_path / "events.db")
    init_db(db_file)
    store = GuestStore(db_file)
    store.add_event("Tech Summit", event_id=EVENT_ID)
    return store


@pytest.fixture
def registered(store):
    return store.add_guest(EVENT_ID, "Ada", "Lovelace", "ada@x.com", phone="555-0100",
                           guest_id="g-1", badge_id="evt12345-1700000000000")


@pytest.fixture
def renderer():
    return StubRenderer()


@pytest.fixture
def app(store, renderer):
    app = app_module.create_app(store=store, renderer=renderer, config={"TESTING": True})
    return app


@pytest.fixture
def client(app):
    return app.test_client()
