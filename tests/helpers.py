# tests/helpers.py
import base64

from fastapi.testclient import TestClient

PDF_BYTES = b"%PDF-1.4\n%StudySync test paper\n"
PDF_DATA_URL = "data:application/pdf;base64," + base64.b64encode(PDF_BYTES).decode()


def signup(client: TestClient, email: str = "ada@example.com", password: str = "secret123", full_name: str = "Ada Lovelace") -> dict:
    """Registers a user and returns the JSON body of the signup response."""
    response = client.post("/api/auth/signup", json={"fullName": full_name, "email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()
