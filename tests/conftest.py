import httpx
import pytest

from bg_editor.session.editor import EditorSession
from tests.fakes import PRESETS, FakeTransformer, preset_transport


@pytest.fixture
def transformer():
    return FakeTransformer()


@pytest.fixture
def fetched():
    return []


@pytest.fixture
def make_editor(transformer, fetched):
    """Factory for editors wired to the fake transformer and preset transport."""
    def _make(**kwargs) -> EditorSession:
        http = httpx.AsyncClient(transport=preset_transport(fetched))
        return EditorSession(transformer, http, PRESETS, session_id="sess_test", **kwargs)

    return _make
