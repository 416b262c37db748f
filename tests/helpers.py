"""Request helpers shared by the HTTP tests."""

PASSWORD = "correct-horse-battery"
FRONTEND_ORIGIN = "http://frontend.test"


def register(client, username="alice", password=PASSWORD, **extra):
    return client.post(
        "/api/auth/register",
        json={"username": username, "password": password, **extra},
    )


def place_order(client, *lines):
    return client.post(
        "/api/orders",
        json={"lines": [{"menuItemId": item, "quantity": qty} for item, qty in lines]},
    )
