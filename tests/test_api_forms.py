import json

import httpx
import pytest
from fastapi.testclient import TestClient

import main
from mailer import RESEND_API_URL, TURNSTILE_VERIFY_URL, ResendClient, TurnstileVerifier


VALID_CONTACT = {
    "name": "Vic",
    "email": "vic@example.com",
    "message": "Can we book the band for a show?",
    "turnstileToken": "token-123",
}


@pytest.fixture
def app_client():
    return TestClient(main.app)


@pytest.fixture
def upstream(monkeypatch):
    """Route mailer and Turnstile traffic to canned responses"""
    calls = []
    state = {
        "turnstile": (200, {"success": True}),
        "resend": (200, {"id": "email-1"}),
    }

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append({"url": str(request.url), "body": body, "headers": request.headers})
        if str(request.url) == TURNSTILE_VERIFY_URL:
            status, payload = state["turnstile"]
        elif str(request.url) == RESEND_API_URL:
            status, payload = state["resend"]
        else:
            raise AssertionError(f"unexpected request to {request.url}")
        return httpx.Response(status, json=payload)

    def install(resend_key="re_test", turnstile_secret="ts_test"):
        transport = httpx.MockTransport(handler)
        monkeypatch.setattr(main, "mailer", ResendClient(resend_key, transport=transport))
        monkeypatch.setattr(main, "turnstile", TurnstileVerifier(turnstile_secret, transport=transport))
        return calls

    install.state = state
    return install


def test_contact_sends_email(app_client, upstream):
    calls = upstream()

    r = app_client.post("/api/contact", json=VALID_CONTACT)

    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Message sent successfully!"}
    assert r.headers["Access-Control-Allow-Origin"] == "*"
    verify, send = calls
    assert verify["body"] == {"secret": "ts_test", "response": "token-123"}
    assert send["headers"]["Authorization"] == "Bearer re_test"
    assert send["body"]["reply_to"] == "vic@example.com"
    assert send["body"]["subject"] == "Contact Form: Vic"


def test_contact_escapes_user_input(app_client, upstream):
    calls = upstream()
    payload = dict(VALID_CONTACT, message="<script>alert('hi')</script> please")

    app_client.post("/api/contact", json=payload)

    html = calls[-1]["body"]["html"]
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


@pytest.mark.parametrize(
    "override, message",
    [
        ({"name": ""}, "All fields are required"),
        ({"turnstileToken": None}, "All fields are required"),
        ({"email": "not-an-email"}, "Invalid email format"),
        ({"message": "too short"}, "Message must be at least 10 characters"),
        ({"message": "x" * 5001}, "Message is too long (max 5000 characters)"),
    ],
)
def test_contact_validation(app_client, upstream, override, message):
    calls = upstream()

    r = app_client.post("/api/contact", json=dict(VALID_CONTACT, **override))

    assert r.status_code == 400
    assert r.json() == {"error": message}
    assert calls == []


def test_contact_rejects_failed_verification(app_client, upstream):
    calls = upstream()
    upstream.state["turnstile"] = (200, {"success": False})

    r = app_client.post("/api/contact", json=VALID_CONTACT)

    assert r.status_code == 400
    assert r.json() == {"error": "Verification failed. Please try again."}
    assert len(calls) == 1


def test_contact_without_configuration(app_client, upstream):
    upstream(resend_key="")

    r = app_client.post("/api/contact", json=VALID_CONTACT)

    assert r.status_code == 500
    assert r.json() == {
        "error": "Server configuration error. Please contact support.",
        "message": "A required service setting is missing.",
    }


def test_contact_reports_resend_failure(app_client, upstream):
    upstream()
    upstream.state["resend"] = (422, {"name": "validation_error"})

    r = app_client.post("/api/contact", json=VALID_CONTACT)

    assert r.status_code == 500
    assert r.json() == {
        "error": "Failed to send message. Please try again.",
        "details": {"name": "validation_error"},
    }


def test_contact_preflight_and_method(app_client):
    r = app_client.options("/api/contact")
    assert r.status_code == 200
    assert r.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
    assert r.headers["Access-Control-Allow-Headers"] == "Content-Type"

    r = app_client.get("/api/contact")
    assert r.status_code == 405
    assert r.json() == {"error": "Method not allowed"}


def test_contact_rejects_malformed_body(app_client, upstream):
    upstream()

    r = app_client.post(
        "/api/contact", content="not json", headers={"Content-Type": "application/json"}
    )

    assert r.status_code == 400
    assert "error" in r.json()


def test_subscribe_sends_welcome_email(app_client, upstream):
    calls = upstream()

    r = app_client.post("/api/subscribe", json={"email": "fan@example.com"})

    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Successfully subscribed!"}
    (send,) = calls
    assert send["body"]["to"] == "fan@example.com"
    assert "mailing list" in send["body"]["html"]


@pytest.mark.parametrize(
    "email, message",
    [
        (None, "Valid email is required"),
        ("nope", "Valid email is required"),
        ("a@b", "Invalid email format"),
        ("a b@c.d", "Invalid email format"),
    ],
)
def test_subscribe_validation(app_client, upstream, email, message):
    upstream()

    r = app_client.post("/api/subscribe", json={"email": email})

    assert r.status_code == 400
    assert r.json() == {"error": message}


def test_subscribe_without_api_key(app_client, upstream):
    upstream(resend_key="")

    r = app_client.post("/api/subscribe", json={"email": "fan@example.com"})

    assert r.status_code == 500
    assert "RESEND" not in r.text


def test_subscribe_reports_resend_failure(app_client, upstream):
    upstream()
    upstream.state["resend"] = (500, {"message": "down"})

    r = app_client.post("/api/subscribe", json={"email": "fan@example.com"})

    assert r.status_code == 500
    assert r.json()["error"] == "Failed to subscribe. Please try again."


def test_subscribe_only_accepts_post(app_client):
    assert app_client.get("/api/subscribe").status_code == 405
