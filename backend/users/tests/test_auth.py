import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

pytestmark = pytest.mark.django_db
User = get_user_model()


@pytest.fixture
def vendor():
    return User.objects.create_user(
        username="hillstays",
        email="Owner@HillStays.example",
        password="testpass",
        account_type=User.AccountType.VENDOR,
    )


def test_login_by_username_sets_cookie_and_claim(vendor):
    client = APIClient()

    resp = client.post(
        "/api/users/token/", {"username": "hillstays", "password": "testpass"}, format="json"
    )

    assert resp.status_code == 200
    assert {"access", "refresh"} <= set(resp.data)
    assert resp.cookies["token"].value == resp.data["access"]
    assert AccessToken(resp.data["access"])["accountType"] == "vendor"


def test_login_by_email_is_case_insensitive(vendor):
    resp = APIClient().post(
        "/api/users/token/",
        {"identifier": "owner@hillstays.example", "password": "testpass"},
        format="json",
    )
    assert resp.status_code == 200


def test_bad_credentials(vendor):
    resp = APIClient().post(
        "/api/users/token/", {"username": "hillstays", "password": "nope"}, format="json"
    )
    assert resp.status_code == 401
    assert resp.data["success"] is False


def test_missing_credentials():
    resp = APIClient().post("/api/users/token/", {"password": "testpass"}, format="json")
    assert resp.status_code == 400
    assert resp.data["message"] == "Provide credentials to log in."


def test_roles():
    admin = User(account_type=User.AccountType.ADMIN)
    staff = User(account_type=User.AccountType.USER, is_staff=True)
    vendor = User(account_type=User.AccountType.VENDOR, username="v", full_name="Hill Stays")

    assert admin.is_admin() and not admin.is_vendor()
    assert staff.is_admin()
    assert vendor.is_vendor() and not vendor.is_admin()
    assert vendor.display_name == "Hill Stays"
    assert User(username="plain").display_name == "plain"
