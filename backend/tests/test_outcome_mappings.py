import pytest
from conftest import data, error


def _plo(client, program_id, code):
    return data(client.post("/api/plos", json={"program_id": program_id, "code": code, "description": f"{code} outcome"}))


def _kas(client, program_id, code, type_="Knowledge"):
    return data(
        client.post("/api/kas-items", json={"program_id": program_id, "type": type_, "code": code, "label": code})
    )


def _plo_kas_codes(client, program_id, plo_id):
    plos = data(client.get(f"/api/programs/{program_id}/plos"))
    return [k["code"] for p in plos if p["id"] == plo_id for k in p["kas"]]


@pytest.fixture()
def outcomes(client, program):
    pid = program["id"]
    return {
        "plo": _plo(client, pid, "PLO1"),
        "k1": _kas(client, pid, "K1"),
        "k2": _kas(client, pid, "K2"),
        "s1": _kas(client, pid, "S1", "Skill"),
    }


def test_replace_all_overwrites_dedupes_and_clears(client, program, outcomes):
    pid, plo = program["id"], outcomes["plo"]["id"]
    k1, k2, s1 = outcomes["k1"]["id"], outcomes["k2"]["id"], outcomes["s1"]["id"]

    resp = client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [k1, k2, k1]})
    assert resp.status_code == 200
    assert data(resp)["count"] == 2
    assert _plo_kas_codes(client, pid, plo) == ["K1", "K2"]

    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [s1]})
    assert _plo_kas_codes(client, pid, plo) == ["S1"]

    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": []})
    assert _plo_kas_codes(client, pid, plo) == []


def test_replace_all_rejects_unknown_ids_without_deleting(client, program, outcomes):
    pid, plo = program["id"], outcomes["plo"]["id"]
    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [outcomes["k1"]["id"]]})

    resp = client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [outcomes["k2"]["id"], "missing-id"]})
    assert resp.status_code == 400
    assert error(resp)["details"]["unknown_ids"] == ["missing-id"]
    assert _plo_kas_codes(client, pid, plo) == ["K1"]


def test_replace_all_validation(client, outcomes):
    resp = client.post("/api/plo-kas", json={"plo_id": outcomes["plo"]["id"]})
    assert resp.status_code == 400
    resp = client.post("/api/plo-kas", json={"kas_ids": []})
    assert resp.status_code == 400
    assert error(resp)["details"]["missing"] == ["plo_id"]
    resp = client.post("/api/plo-kas", json={"plo_id": "no-such-plo", "kas_ids": []})
    assert resp.status_code == 404


def test_malformed_ids_are_rejected(client, program, outcomes):
    plo, k1 = outcomes["plo"]["id"], outcomes["k1"]["id"]
    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [k1]})

    bad_requests = [
        ("POST", "/api/plo-kas", {"plo_id": plo, "kas_ids": [[k1]]}),
        ("POST", "/api/plo-kas", {"plo_id": {"x": 1}, "kas_ids": [k1]}),
        ("POST", "/api/plo-kas", {"plo_id": plo, "kas_ids": k1}),
        ("POST", "/api/clo-plo", {"clo_id": [plo], "plo_ids": []}),
        ("DELETE", "/api/plo-kas", {"plo_id": plo, "kas_id": {"a": 1}}),
        ("DELETE", "/api/plo-kas", {"plo_id": plo, "kas_id": "  "}),
    ]
    for method, url, body in bad_requests:
        resp = client.request(method, url, json=body)
        assert resp.status_code == 400, (method, url, body)
        assert error(resp)["code"] == "VALIDATION_ERROR"

    assert _plo_kas_codes(client, program["id"], plo) == ["K1"]


def test_pair_delete_is_idempotent(client, program, outcomes):
    plo, k1 = outcomes["plo"]["id"], outcomes["k1"]["id"]
    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [k1, outcomes["k2"]["id"]]})

    first = client.request("DELETE", "/api/plo-kas", json={"plo_id": plo, "kas_id": k1})
    assert first.status_code == 200
    assert data(first)["removed"] == 1
    second = client.request("DELETE", "/api/plo-kas", json={"plo_id": plo, "kas_id": k1})
    assert second.status_code == 200
    assert data(second)["removed"] == 0
    assert _plo_kas_codes(client, program["id"], plo) == ["K2"]


def test_deleting_kas_item_drops_its_mappings(client, program, outcomes):
    plo = outcomes["plo"]["id"]
    client.post("/api/plo-kas", json={"plo_id": plo, "kas_ids": [outcomes["k1"]["id"], outcomes["k2"]["id"]]})
    client.delete(f"/api/kas-items/{outcomes['k1']['id']}")
    assert _plo_kas_codes(client, program["id"], plo) == ["K2"]


def test_kas_items_filtered_by_type(client, program, outcomes):
    skills = data(client.get(f"/api/programs/{program['id']}/kas-items", params={"type": "Skill"}))
    assert [k["code"] for k in skills] == ["S1"]
    resp = client.post("/api/kas-items", json={"program_id": program["id"], "type": "Other", "code": "O1", "label": "x"})
    assert resp.status_code == 400


def test_plo_code_unique_within_program_only(client, program, outcomes):
    resp = client.post("/api/plos", json={"program_id": program["id"], "code": "PLO1", "description": "again"})
    assert resp.status_code == 409
    assert error(resp)["message"] == "PLO code already exists in this program"

    other = data(client.post("/api/programs", json={"code": "OTHER", "name_th": "อื่น"}))
    resp = client.post("/api/plos", json={"program_id": other["id"], "code": "PLO1", "description": "ok"})
    assert resp.status_code == 201


def test_plo_update_keeps_unset_fields(client, outcomes):
    plo = outcomes["plo"]
    updated = data(client.put(f"/api/plos/{plo['id']}", json={"description": "Revised"}))
    assert updated["description"] == "Revised"
    assert updated["code"] == "PLO1"
    assert updated["updated_at"] is not None


def test_mlo_kas_mapping(client, program, outcomes):
    group = data(client.post("/api/major-groups", json={"program_id": program["id"], "label": "Software"}))
    groups = data(client.get(f"/api/programs/{program['id']}/major-groups"))
    assert groups[0]["label"] == "Software"
    assert groups[0]["major_name_th"] is None

    mlo = data(client.post("/api/mlos", json={"major_group_id": group["id"], "code": "MLO1", "description": "m"}))
    client.post("/api/mlo-kas", json={"mlo_id": mlo["id"], "kas_ids": [outcomes["s1"]["id"]]})
    rows = data(client.get(f"/api/major-groups/{group['id']}/mlos"))
    assert [k["code"] for k in rows[0]["kas"]] == ["S1"]

    resp = client.post("/api/mlos", json={"major_group_id": group["id"], "code": "MLO1", "description": "dup"})
    assert resp.status_code == 409


def test_clo_mappings_and_program_view(client, course, program, outcomes):
    subject = data(client.post("/api/subjects", json={"code": "CS101", "name_th": "Programming", "default_credits": 3}))
    plan = data(client.post("/api/study-plans", json={"course_id": course["id"], "academic_year": 2567, "year_no": 1}))
    sem = data(client.post("/api/semesters", json={"study_plan_id": plan["id"], "term_no": 1}))
    client.post("/api/semester-subjects", json={"semester_id": sem["id"], "subject_id": subject["id"]})

    clo = data(client.post("/api/clos", json={"subject_id": subject["id"], "seq": 1, "description_th": "เขียนโปรแกรมได้"}))
    assert client.post("/api/clos", json={"subject_id": subject["id"], "seq": 1, "description_th": "dup"}).status_code == 409

    client.post("/api/clo-plo", json={"clo_id": clo["id"], "plo_ids": [outcomes["plo"]["id"]]})
    client.post("/api/clo-kas", json={"clo_id": clo["id"], "kas_ids": [outcomes["k2"]["id"], outcomes["k1"]["id"]]})

    clos = data(client.get(f"/api/subjects/{subject['id']}/clos"))
    assert [p["code"] for p in clos[0]["plos"]] == ["PLO1"]
    assert [k["code"] for k in clos[0]["kas"]] == ["K1", "K2"]
    assert clos[0]["mlos"] == []
    assert data(client.get(f"/api/clos/{clo['id']}"))["seq"] == 1

    view = data(client.get(f"/api/programs/{program['id']}/clo-full"))
    assert len(view) == 1
    assert view[0]["subject_code"] == "CS101"
    assert view[0]["plo_codes"] == ["PLO1"]
    assert view[0]["kas_codes"] == ["K1", "K2"]

    assert data(client.get(f"/api/programs/{program['id']}/clo-full", params={"subject_id": 999})) == []


def test_plo_kas_end_to_end(client):
    """Program, PLO and two KAS items; map, read back, remap, then remove one pair."""
    prog = data(client.post("/api/programs", json={"code": "P-E2E", "name_th": "e2e"}))
    plo = _plo(client, prog["id"], "PLO1")
    k1 = _kas(client, prog["id"], "K1")
    a1 = _kas(client, prog["id"], "A1", "Attitude")

    client.post("/api/plo-kas", json={"plo_id": plo["id"], "kas_ids": [k1["id"], a1["id"]]})
    plos = data(client.get(f"/api/programs/{prog['id']}/plos"))
    assert {k["type"] for k in plos[0]["kas"]} == {"Knowledge", "Attitude"}

    client.post("/api/plo-kas", json={"plo_id": plo["id"], "kas_ids": [a1["id"]]})
    assert _plo_kas_codes(client, prog["id"], plo["id"]) == ["A1"]

    client.request("DELETE", "/api/plo-kas", json={"plo_id": plo["id"], "kas_id": a1["id"]})
    assert _plo_kas_codes(client, prog["id"], plo["id"]) == []
