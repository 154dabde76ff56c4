from workhub_api.extensions import db
from workhub_api.models.employee import TeamMember


def test_team_roster_and_membership(client, team, make_employee):
    e2 = make_employee("E2", name="Zed")

    r = client.get(f"/api/team-lead?team_lead_id={team.tl1.code}", headers=team.h_tl1).get_json()
    assert [m["employee_id"] for m in r["data"]] == ["E1"]
    assert r["team_lead"]["employee_id"] == "TL1"

    r = client.post("/api/team-lead", json={"employee_id": e2.code, "team_lead_id": team.tl1.id},
                    headers=team.h_tl1)
    assert r.status_code == 201
    tm_id = r.get_json()["data"]["team_member_id"]

    r = client.post("/api/team-lead", json={"employee_id": e2.code, "team_lead_id": team.tl1.id},
                    headers=team.h_tl1)
    assert r.status_code == 400

    r = client.delete("/api/team-lead", json={"team_member_id": tm_id}, headers=team.h_tl1)
    assert r.status_code == 200
    assert db.session.get(TeamMember, tm_id).is_active is False

    r = client.post("/api/team-lead", json={"employee_id": e2.code, "team_lead_id": team.tl1.id},
                    headers=team.h_tl1)
    assert r.status_code == 201
    assert r.get_json()["data"]["team_member_id"] == tm_id


def test_available_employees_exclude_members_and_lead(client, team):
    r = client.get(f"/api/team-lead?team_lead_id={team.tl1.id}&get_available=true&limit=50",
                   headers=team.h_tl1).get_json()
    codes = {e["employee_id"] for e in r["data"]}
    assert "E1" not in codes
    assert "TL1" not in codes
    assert {"M1", "M2", "TL2"} <= codes
    assert r["pagination"]["totalCount"] == len(codes)


def test_lead_cannot_manage_another_team(client, team):
    r = client.get(f"/api/team-lead?team_lead_id={team.tl1.id}", headers=team.h_tl2)
    assert r.status_code == 403
    r = client.get(f"/api/team-lead?team_lead_id={team.tl1.id}", headers=team.h_m2)
    assert r.status_code == 200
    r = client.get(f"/api/team-lead?team_lead_id={team.tl1.id}", headers=team.h_e1)
    assert r.status_code == 403


def test_lead_cannot_join_own_team(client, team):
    r = client.post("/api/team-lead", json={"employee_id": team.tl1.id, "team_lead_id": team.tl1.id},
                    headers=team.h_tl1)
    assert r.status_code == 400
