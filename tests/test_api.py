import pytest
from fastapi.testclient import TestClient

from db.store import Store
from main import app


@pytest.fixture
def client(tmp_path, config_dir):
    store = Store(tmp_path / "api.db")
    app.state.store = store
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.state.store = None
        store.close()


def _deck_with_note(client, name="Algebra", front="1+1?", back="2"):
    deck = client.post("/decks/", json={"name": name}).json()
    note = client.post(f"/decks/{deck['id']}/notes", json={"front": front, "back": back}).json()
    return deck, note


def test_review_flow_schedules_and_persists(client):
    deck, note = _deck_with_note(client)

    response = client.get(f"/review/{deck['id']}/next")
    assert response.status_code == 200
    body = response.json()
    assert body["note"]["fields"] == {"front": "1+1?", "back": "2"}
    assert body["card"]["noteId"] == note["id"]
    assert body["card"]["state"] == "new"
    assert body["previews"] == {"again": 1, "hard": 1, "good": 1, "easy": 4}

    card_id = body["card"]["id"]
    response = client.post(f"/review/{card_id}", json={"grade": "good"})
    assert response.status_code == 200
    result = response.json()
    assert result["interval"] == 1
    assert result["card"]["reps"] == 1
    assert result["card"]["state"] == "review"

    saved = client.get(f"/cards/{card_id}").json()
    assert saved["reps"] == 1
    assert saved["interval"] == 1

    # Due tomorrow, so nothing is left for today.
    assert client.get(f"/review/{deck['id']}/next").json()["card"] is None


def test_unknown_grade_is_rejected(client):
    deck, _ = _deck_with_note(client)
    card_id = client.get(f"/review/{deck['id']}/next").json()["card"]["id"]
    response = client.post(f"/review/{card_id}", json={"grade": "perfect"})
    assert response.status_code == 422
    assert client.get(f"/cards/{card_id}").json()["reps"] == 0


def test_deck_listing_reports_stats(client):
    deck, _ = _deck_with_note(client)
    client.post(f"/decks/{deck['id']}/notes", json={"front": "2+2?", "back": "4"})

    [listed] = client.get("/decks/").json()
    assert listed["name"] == "Algebra"
    assert listed["stats"] == {"notes": 2, "due": 2}


def test_deck_validation_and_missing_ids(client):
    assert client.post("/decks/", json={"name": "   "}).status_code == 400
    assert client.get("/decks/99").status_code == 404
    assert client.patch("/decks/99", json={"name": "x"}).status_code == 404
    assert client.post("/decks/99/notes", json={"front": "q", "back": "a"}).status_code == 404
    assert client.post("/review/99", json={"grade": "good"}).status_code == 404

    deck = client.post("/decks/", json={"name": "Empty"}).json()
    response = client.post(f"/decks/{deck['id']}/notes", json={"front": " ", "back": ""})
    assert response.status_code == 400


def test_rename_and_delete_deck(client):
    deck, note = _deck_with_note(client)

    renamed = client.patch(f"/decks/{deck['id']}", json={"name": "Arithmetic"}).json()
    assert renamed["name"] == "Arithmetic"

    response = client.delete(f"/decks/{deck['id']}")
    assert response.json() == {"notes": 1, "cards": 1}
    assert client.get(f"/notes/{note['id']}").status_code == 404
    assert client.get("/decks/").json() == []


def test_note_edit_and_delete(client):
    deck, note = _deck_with_note(client)

    updated = client.put(f"/notes/{note['id']}", json={"front": "1+1=?", "back": "two"}).json()
    assert updated["fields"] == {"front": "1+1=?", "back": "two"}

    assert client.delete(f"/notes/{note['id']}").status_code == 204
    assert client.get(f"/decks/{deck['id']}/notes").json() == []
    assert client.delete(f"/notes/{note['id']}").status_code == 404


def test_suspended_cards_are_not_offered(client):
    deck, _ = _deck_with_note(client)
    card_id = client.get(f"/review/{deck['id']}/next").json()["card"]["id"]

    assert client.post(f"/cards/{card_id}/suspend").json()["state"] == "suspended"
    assert client.get(f"/review/{deck['id']}/next").json()["card"] is None

    assert client.post(f"/cards/{card_id}/unsuspend").json()["state"] == "new"
    assert client.get(f"/review/{deck['id']}/next").json()["card"]["id"] == card_id


def test_grading_suspended_card_is_refused(client):
    deck, _ = _deck_with_note(client)
    card_id = client.get(f"/review/{deck['id']}/next").json()["card"]["id"]
    client.post(f"/cards/{card_id}/suspend")

    response = client.post(f"/review/{card_id}", json={"grade": "good"})

    assert response.status_code == 409
    card = client.get(f"/cards/{card_id}").json()
    assert card["state"] == "suspended"
    assert card["reps"] == 0


def test_export_and_import_files(client):
    _deck_with_note(client, name="Spanish", front="hola", back="hello")

    exported = client.get("/transfer/export.json")
    assert exported.status_code == 200
    assert "attachment; filename=cardbox-export-" in exported.headers["content-disposition"]

    response = client.post(
        "/transfer/import",
        files={"file": ("backup.json", exported.content, "application/json")},
    )
    assert response.json() == {"decks": 1, "notes": 1, "cards": 1}
    assert len(client.get("/decks/").json()) == 2

    csv_text = client.get("/transfer/export.csv").text
    assert csv_text.splitlines()[0] == "deckName,front,back"
    response = client.post(
        "/transfer/import",
        files={"file": ("notes.csv", csv_text.encode("utf-8"), "text/csv")},
    )
    assert response.json() == {"imported": 2, "failed": 0, "errors": []}


def test_import_rejects_bad_files(client):
    bad_csv = client.post(
        "/transfer/import",
        files={"file": ("notes.csv", b"question,answer\nq,a", "text/csv")},
    )
    assert bad_csv.status_code == 400

    bad_json = client.post(
        "/transfer/import",
        files={"file": ("backup.json", b'{"decks": []}', "application/json")},
    )
    assert bad_json.status_code == 400

    wrong_type = client.post(
        "/transfer/import",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert wrong_type.status_code == 400
    assert client.get("/decks/").json() == []
