from conftest import data, error


def test_alignment_checks_upsert(client, program):
    pid = program["id"]
    plo = data(client.post("/api/plos", json={"program_id": pid, "code": "PLO1", "description": "d"}))
    row = data(
        client.post("/api/alignment-rows", json={"program_id": pid, "group_label": "Industry", "title": "Employer needs"})
    )

    resp = client.put(f"/api/alignment-rows/{row['id']}/plo-checks", json={"plo_id": plo["id"], "checked": True})
    assert resp.status_code == 200
    client.put(f"/api/alignment-rows/{row['id']}/plo-checks", json={"plo_id": plo["id"], "checked": False})

    rows = data(client.get(f"/api/programs/{pid}/alignment-rows"))
    assert rows[0]["plo_checks"] == [{"plo_id": plo["id"], "code": "PLO1", "checked": False}]
    assert rows[0]["mlo_checks"] == []


def test_alignment_check_unknown_targets(client, program):
    row = data(
        client.post("/api/alignment-rows", json={"program_id": program["id"], "group_label": "g", "title": "t"})
    )
    resp = client.put(f"/api/alignment-rows/{row['id']}/plo-checks", json={"plo_id": "nope", "checked": True})
    assert resp.status_code == 404
    resp = client.put("/api/alignment-rows/nope/mlo-checks", json={"mlo_id": "x", "checked": True})
    assert resp.status_code == 404
    assert error(resp)["message"] == "Alignment row not found"


def test_alignment_row_update_and_delete(client, program):
    row = data(
        client.post("/api/alignment-rows", json={"program_id": program["id"], "group_label": "g", "title": "t"})
    )
    updated = data(client.put(f"/api/alignment-rows/{row['id']}", json={"title": "renamed"}))
    assert updated["title"] == "renamed"
    assert updated["group_label"] == "g"
    assert client.delete(f"/api/alignment-rows/{row['id']}").status_code == 200
    assert data(client.get(f"/api/programs/{program['id']}/alignment-rows")) == []


def test_plo_score_upsert(client, program):
    body = {"program_id": program["id"], "lo_level": "PLO", "lo_code": "PLO1", "academic_year": 2567, "semester_1": 3.0}
    first = data(client.post("/api/plo-scores", json=body))
    second = data(client.post("/api/plo-scores", json={**body, "semester_1": 3.5, "semester_2": 4.0}))
    assert second["id"] == first["id"]
    assert second["semester_1"] == 3.5

    rows = data(client.get(f"/api/programs/{program['id']}/plo-scores", params={"year": 2567}))
    assert len(rows) == 1

    summary = data(client.get(f"/api/programs/{program['id']}/plo-score-summary"))
    assert summary[0]["average"] == 3.75


def test_plo_score_summary_single_semester(client, program):
    client.post(
        "/api/plo-scores",
        json={"program_id": program["id"], "lo_level": "PLO", "lo_code": "PLO2", "academic_year": 2566, "semester_2": 2.5},
    )
    summary = data(client.get(f"/api/programs/{program['id']}/plo-score-summary", params={"year": 2566}))
    assert summary == [
        {"lo_level": "PLO", "lo_code": "PLO2", "academic_year": 2566, "semester_1": None, "semester_2": 2.5, "average": 2.5}
    ]


def test_plo_score_update_and_delete(client, program):
    score = data(
        client.post(
            "/api/plo-scores",
            json={"program_id": program["id"], "lo_level": "PLO", "lo_code": "PLO1", "academic_year": 2567},
        )
    )
    updated = data(client.put(f"/api/plo-scores/{score['id']}", json={"note": "reviewed"}))
    assert updated["note"] == "reviewed"
    assert updated["lo_code"] == "PLO1"
    assert client.delete(f"/api/plo-scores/{score['id']}").status_code == 200
    assert client.delete(f"/api/plo-scores/{score['id']}").status_code == 404
