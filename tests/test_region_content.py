from conftest import login

from app.rdcpm.modules.region_content.service import validate_section_payload


def _section(client, expected=201, **kw):
    payload = {"regionId": "anna-regina", "sectionType": "about", "title": "About Anna Regina", "content": "Capital of Region 2."}
    payload.update(kw)
    r = client.post("/api/v1/region-content", json=payload)
    assert r.status_code == expected, r.json
    return r.json["section"]


def test_validate_section_payload():
    errors = validate_section_payload({"regionId": "anna-regina", "sectionType": "gossip", "title": "t", "content": "c", "displayOrder": "1", "isVisible": 1, "metadata": []})
    assert any(e.startswith("Invalid sectionType") for e in errors)
    assert "displayOrder must be a whole number." in errors
    assert "isVisible must be true or false." in errors
    assert "metadata must be an object." in errors
    assert validate_section_payload({}, partial=True) == ["No fields to update."]


def test_upsert_creates_then_overwrites(admin_client):
    first = _section(admin_client, displayOrder=3, isVisible=False, metadata={"population": 12000})
    assert first["displayOrder"] == 3
    assert first["metadata"] == {"population": 12000}

    second = _section(admin_client, expected=200, title="About the town")
    assert second["id"] == first["id"]
    assert second["title"] == "About the town"
    # omitted fields fall back to their defaults
    assert second["displayOrder"] == 0
    assert second["isVisible"] is True
    assert second["metadata"] is None


def test_public_views_hide_invisible_sections(admin_client):
    _section(admin_client, sectionType="contact", title="Contact", displayOrder=2)
    _section(admin_client, sectionType="about", displayOrder=1)
    _section(admin_client, sectionType="history", title="History", isVisible=False)

    public = admin_client.application.test_client()
    sections = public.get("/api/v1/region-content/region/anna-regina").json["sections"]
    assert [sec["sectionType"] for sec in sections] == ["about", "contact"]
    assert "createdBy" not in sections[0]

    r = public.get("/api/v1/region-content/region/anna-regina/section/contact")
    assert r.status_code == 200
    assert r.json["section"]["title"] == "Contact"
    assert public.get("/api/v1/region-content/region/anna-regina/section/history").status_code == 404
    assert public.get("/api/v1/region-content/region/bartica/section/about").status_code == 404

    everything = admin_client.get("/api/v1/region-content/region/anna-regina/all").json["sections"]
    assert len(everything) == 3


def test_manage_permission_required(client):
    login(client, "alice")
    r = client.post("/api/v1/region-content", json={"regionId": "anna-regina", "sectionType": "about", "title": "x", "content": "y"})
    assert r.status_code == 403
    assert client.get("/api/v1/region-content/region/anna-regina/all").status_code == 403


def test_update_and_delete(admin_client):
    sid = _section(admin_client)["id"]
    r = admin_client.put(f"/api/v1/region-content/{sid}", json={"isVisible": False, "displayOrder": 5})
    assert r.status_code == 200
    assert r.json["section"]["isVisible"] is False
    assert r.json["section"]["displayOrder"] == 5

    assert admin_client.put(f"/api/v1/region-content/{sid}", json={}).status_code == 400
    assert admin_client.put("/api/v1/region-content/missing", json={"title": "x"}).status_code == 404

    r = admin_client.delete(f"/api/v1/region-content/{sid}")
    assert r.json["success"] is True
    assert admin_client.get("/api/v1/region-content/region/anna-regina/all").json["sections"] == []
