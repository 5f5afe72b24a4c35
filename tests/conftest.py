import copy

import pytest

from spec_assistant.search import SearchConfig, SpecCollection

SAMPLE_PAYLOAD = {
    "specs": [
        {
            "heading": {"value": "User login", "line_no": 1},
            "file_name": "specs/login.spec",
            "contexts": [{"line_text": "Open the browser", "line_no": 3}],
            "comments": [{"value": "Covers the login form", "line_no": 2}],
            "tags": ["smoke-test", "auth"],
            "scenarios": [
                {
                    "heading": {"value": "Successful login with valid credentials", "line_no": 5},
                    "steps": [
                        {"line_text": "Enter username", "line_no": 6},
                        {"line_text": "Enter password", "line_no": 7},
                        {"line_text": "Submit the form", "line_no": 8},
                    ],
                    "tags": ["smoke-test"],
                },
                {
                    "heading": {"value": "Login fails with wrong password", "line_no": 12},
                    "steps": [{"line_text": "Enter a wrong password", "line_no": 13}],
                    "comments": [{"value": "Error banner is shown", "line_no": 14}],
                    "tags": ["auth", "negative"],
                },
                {
                    "heading": {"value": "Password reset email", "line_no": 20},
                    "steps": [{"line_text": "Request a reset link", "line_no": 21}],
                },
            ],
        },
        {
            "heading": {"value": "Checkout cart", "line_no": 1},
            "file_name": "specs/checkout.spec",
            "tags": ["payments"],
        },
    ]
}


@pytest.fixture
def sample_payload():
    return copy.deepcopy(SAMPLE_PAYLOAD)


@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    (root / "specs").mkdir(parents=True)
    return root


@pytest.fixture
def specs(sample_payload):
    return SpecCollection.from_dict(sample_payload)


@pytest.fixture
def config(project_root):
    return SearchConfig(project_root=project_root, max_workers=4)
