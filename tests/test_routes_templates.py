# tests/test_routes_templates.py - Tests API modèles PDF et conditions générales

from sqlalchemy import text

from services.pdf_settings import DEFAULT_TERMS


def _create(api, headers, **fields):
    response = api.post("/api/templates", headers=headers, json={"name": "Studio", **fields})
    assert response.status_code == 201
    return response.json()


def test_create_and_list_templates(api, designer_headers, client_headers, test_db):
    created = _create(api, designer_headers, companyName="Studio Kapoor", accentColor="#aa3300")

    assert created["isDefault"] is False
    assert created["createdBy"] == "designer-1"
    assert created["companyName"] == "Studio Kapoor"

    response = api.get("/api/templates", headers=client_headers)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [created["id"]]


def test_client_cannot_create_template(api, client_headers, test_db):
    response = api.post("/api/templates", headers=client_headers, json={"name": "Mine"})
    assert response.status_code == 403


def test_invalid_color_rejected(api, designer_headers, test_db):
    response = api.post("/api/templates", headers=designer_headers, json={"name": "Red", "accentColor": "red"})
    assert response.status_code == 422


def test_update_template(api, designer_headers, test_db):
    template = _create(api, designer_headers, footerText="Thanks!")

    response = api.put(
        f"/api/templates/{template['id']}",
        headers=designer_headers,
        json={"name": "Studio v2", "headerBg": "#f0f0f0"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Studio v2"
    assert data["headerBg"] == "#f0f0f0"
    assert data["footerText"] == "Thanks!"


def test_update_unknown_template(api, designer_headers, test_db):
    response = api.put("/api/templates/missing", headers=designer_headers, json={"name": "x"})
    assert response.status_code == 404


def test_set_default_keeps_a_single_default(api, designer_headers, test_db):
    first = _create(api, designer_headers, isDefault=True)
    second = _create(api, designer_headers, name="Minimal")

    response = api.post(f"/api/templates/{second['id']}/set-default", headers=designer_headers)
    assert response.status_code == 200
    assert response.json()["isDefault"] is True

    defaults = {t["id"]: t["isDefault"] for t in api.get("/api/templates", headers=designer_headers).json()}
    assert defaults == {first["id"]: False, second["id"]: True}


def test_set_default_unknown_template(api, designer_headers, test_db):
    response = api.post("/api/templates/missing/set-default", headers=designer_headers)
    assert response.status_code == 404


# === Conditions générales ===

def test_terms_default_then_saved(api, designer_headers, client_headers, test_db):
    response = api.get("/api/settings/terms", headers=client_headers)
    assert response.status_code == 200
    assert response.json() == {"content": DEFAULT_TERMS}

    response = api.put("/api/settings/terms", headers=designer_headers, json={"content": "Net 15"})
    assert response.json() == {"content": "Net 15"}

    response = api.put("/api/settings/terms", headers=designer_headers, json={"content": "Net 30"})
    assert response.json() == {"content": "Net 30"}

    assert api.get("/api/settings/terms", headers=client_headers).json() == {"content": "Net 30"}
    assert len(test_db.execute(text("select id from terms_conditions")).all()) == 1


def test_client_cannot_edit_terms(api, client_headers, test_db):
    response = api.put("/api/settings/terms", headers=client_headers, json={"content": "Free"})
    assert response.status_code == 403
