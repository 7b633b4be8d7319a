import pytest
import sys

@pytest.fixture(autouse=True)
def clean_oceanturb_imports():
    yield
    keys_to_delete = {key for key in sys.modules if key == "oceanturb" or key.startswith("oceanturb.")}
    for key in keys_to_delete:
        del sys.modules[key]
