"""
End-to-end tests through the Flask test client
"""
from extensions import db
from models import User
from ledger.products import ProductCatalog


SIGNUP = {
    "fullName": "Jane Doe",
    "email": "jane@example.com",
    "password": "secret123",
    "contact": "0772000000",
    "district": "Kampala",
}


def signup(client, **overrides):
    payload = dict(SIGNUP, **overrides)
    return client.post("/api/signup", json=payload)


class TestAuthEndpoints:
    def test_signup_signs_in(self, client):
        response = signup(client)

        assert response.status_code == 201
        body = response.get_json()
        assert body["message"] == "Registration successful! Welcome to Conomy Investments."
        assert body["user"]["balance"] == 0

        session = client.get("/session").get_json()
        assert session["authenticated"] is True
        assert session["user"]["email"] == "jane@example.com"

    def test_signup_validation_error(self, client):
        response = signup(client, district="")

        assert response.status_code == 400
        assert "District" in response.get_json()["error"]

    def test_signup_without_json(self, client):
        response = client.post("/api/signup", data="nope")

        assert response.status_code == 400

    def test_login_and_logout(self, client):
        signup(client)
        client.post("/api/logout")
        assert client.get("/session").get_json() == {"authenticated": False}

        bad = client.post("/api/login", json={"email": "jane@example.com", "password": "nope123"})
        assert bad.status_code == 401

        good = client.post("/api/login", json={"email": "jane@example.com", "password": "secret123"})
        assert good.status_code == 200
        assert good.get_json()["message"] == "Login successful!"


class TestBalanceEndpoint:
    def test_signed_out_balance_is_not_zero(self, client):
        body = client.get("/api/balance").get_json()

        assert body == {"balance": None, "available": False}

    def test_signed_in_balance(self, client):
        signup(client)

        body = client.get("/api/balance").get_json()

        assert body == {"balance": 0, "available": True, "currency": "UGX"}


class TestRequestEndpoints:
    def test_recharge(self, client):
        signup(client)

        response = client.post("/api/recharge", json={"amount": 1000, "momoNumber": "0772123456"})

        assert response.status_code == 201
        body = response.get_json()
        assert body["message"] == "Deposit request of UGX 1,000 submitted successfully!"
        assert body["recharge"]["status"] == "Pending"

    def test_recharge_below_minimum(self, client):
        signup(client)

        response = client.post("/api/recharge", json={"amount": 999, "momoNumber": "0772123456"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Minimum deposit amount is UGX 1,000."

    def test_recharge_over_maximum(self, client):
        signup(client)

        response = client.post("/api/recharge", json={"amount": 10**19, "momoNumber": "0772123456"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Amount cannot exceed 1,000,000,000"

    def test_recharge_signed_out(self, client):
        response = client.post("/api/recharge", json={"amount": 5000, "momoNumber": "0772123456"})

        assert response.status_code == 401

    def test_withdraw_over_balance(self, client):
        signup(client)

        response = client.post("/api/withdraw", json={"amount": 10000, "payoutNumber": "0772123456"})

        assert response.status_code == 402


class TestInvestEndpoints:
    def test_buy_and_list(self, client, set_balance):
        ProductCatalog().seed_default_products()
        user_id = signup(client).get_json()["user"]["userId"]
        set_balance(user_id, 15000)

        products = client.get("/api/products").get_json()["products"]
        assert [p["productId"] for p in products][0] == "starter"

        response = client.post("/api/products/starter/invest")
        assert response.status_code == 201
        assert response.get_json()["balance"] == 5000

        mine = client.get("/api/my-products").get_json()
        assert mine["empty"] is False
        assert mine["investments"][0]["statusText"] == "In Progress"

        activity = client.get("/api/activity").get_json()
        assert activity["count"] == 1
        assert activity["activities"][0]["status"] == "Completed"
        assert activity["activities"][0]["amount"] == -10000

    def test_buy_without_funds(self, client):
        ProductCatalog().seed_default_products()
        signup(client)

        response = client.post("/api/products/starter/invest")

        assert response.status_code == 402
        db.session.expire_all()
        assert User.query.one().balance == 0

    def test_unknown_product(self, client):
        signup(client)

        assert client.post("/api/products/diamond/invest").status_code == 404

    def test_invest_signed_out(self, client):
        assert client.post("/api/products/starter/invest").status_code == 401


class TestTeamAndActivityEndpoints:
    def test_team_lists_referrals(self, client):
        code = signup(client).get_json()["user"]["referralCode"]
        client.post("/api/logout")
        signup(client, email="bob@example.com", fullName="Bob", referralCode=code)
        client.post("/api/logout")
        client.post("/api/login", json={"email": "jane@example.com", "password": "secret123"})

        team = client.get("/api/team").get_json()

        assert team["count"] == 1
        assert team["members"][0]["fullName"] == "Bob"
        assert team["members"][0]["position"] == 1

    def test_activity_limit_bounds(self, client):
        signup(client)

        assert client.get("/api/activity?limit=0").status_code == 400
        assert client.get("/api/activity?limit=101").status_code == 400
        assert client.get("/api/activity?limit=5").status_code == 200

    def test_activity_signed_out(self, client):
        assert client.get("/api/activity").status_code == 401

    def test_profile(self, client):
        user_id = signup(client).get_json()["user"]["userId"]

        profile = client.get("/user/profile").get_json()

        assert profile["displayName"] == "Jane Doe"
        assert profile["shortId"] == f"ID: {user_id[:6]}..."

    def test_profile_and_team_signed_out(self, client):
        assert client.get("/user/profile").get_json() == {"error": "Unauthorized"}
        assert client.get("/api/team").status_code == 401
