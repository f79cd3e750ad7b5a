from fastapi.testclient import TestClient


def create_user(client: TestClient, name: str = "Ada", email: str = "ada@example.com", password: str = "strong-password"):
    """
    Helper to create a user through the API and return its summary.
    """
    response = client.post("/api/users", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def create_task(client: TestClient, owner_id: int, title: str, order: int = 0, description: str = None):
    """
    Helper to create a task through the API and return it.
    """
    task_data = {"title": title, "owner_id": owner_id, "order": order}
    if description:
        task_data["description"] = description
    response = client.post("/api/tasks", json=task_data)
    assert response.status_code == 201, response.text
    return response.json()
