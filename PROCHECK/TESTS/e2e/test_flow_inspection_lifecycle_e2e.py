# Руководство к файлу (TESTS/e2e/test_flow_inspection_lifecycle_e2e.py)
# Назначение:
# - Полный e2e-флоу через HTTP: заявка на аккаунт -> одобрение -> вход заказчика ->
#   проверка по шаблону -> назначение -> работа инспектора -> отчёт -> фиксация.

from __future__ import annotations

import pytest


ADMIN = "user-admin"
SENIOR = "user-senior"
INSPECTOR = "user-inspector"


@pytest.mark.asyncio
async def test_flow_from_account_request_to_locked_report(http_client, as_user):
    # Новый заказчик подаёт заявку, администратор одобряет
    req = (
        await http_client.post(
            "/account-requests",
            json={"username": "zavod", "password": "zavod-pass", "role": "customer", "purpose": "Аудит"},
        )
    ).json()
    customer = (await http_client.post(f"/account-requests/{req['id']}/approve", headers=as_user(ADMIN))).json()

    login = await http_client.post("/auth/login", json={"username": "zavod", "password": "zavod-pass"})
    assert login.status_code == 200
    cid = login.json()["user"]["id"]
    assert cid == customer["id"]

    # Заказчик создаёт проверку по шаблону пожарной безопасности
    resp = await http_client.post(
        "/inspections",
        json={
            "title": "Пожарный аудит цеха",
            "type": "Пожарная безопасность",
            "enterprise_name": "АО «Завод»",
            "enterprise_address": "г. Казань, ул. Промышленная, 3",
            "plan_date": "2025-07-01T08:00:00Z",
            "report_due_date": "2025-07-10T18:00:00Z",
            "template_id": "template-fire",
        },
        headers=as_user(cid),
    )
    assert resp.status_code == 200
    inspection = resp.json()
    iid = inspection["id"]
    assert len(inspection["check_items"]) == 3

    # Старший инспектор назначает исполнителя и переносит дату
    resp = await http_client.post(
        f"/inspections/{iid}/assign",
        json={"inspector_id": INSPECTOR, "plan_date": "2025-07-03T08:00:00"},
        headers=as_user(SENIOR),
    )
    assert resp.status_code == 200
    assigned = resp.json()
    assert assigned["status"] == "назначена"
    assert assigned["approved_by_id"] == SENIOR
    assert assigned["plan_date"].startswith("2025-07-03T08:00:00")

    # После назначения заказчик уже не правит проверку
    resp = await http_client.patch(f"/inspections/{iid}", json={"title": "Поздно"}, headers=as_user(cid))
    assert resp.status_code == 409

    # Инспектор начинает работу и отмечает пункты
    resp = await http_client.post(f"/inspections/{iid}/start", headers=as_user(INSPECTOR))
    assert resp.json()["status"] == "выполняется"
    for item, status in zip(assigned["check_items"], ["соответствует", "не соответствует", "соответствует"]):
        resp = await http_client.patch(
            f"/inspections/{iid}/check-items/{item['id']}", json={"status": status}, headers=as_user(INSPECTOR)
        )
        assert resp.status_code == 200
    resp = await http_client.post(f"/inspections/{iid}/photos", json={"ref": "photos/extinguisher.jpg"}, headers=as_user(INSPECTOR))
    assert [p["ref"] for p in resp.json()["photos"]] == ["photos/extinguisher.jpg"]

    # Отчёт завершает проверку
    resp = await http_client.post("/reports", json={"inspection_id": iid}, headers=as_user(INSPECTOR))
    assert resp.status_code == 200
    report = resp.json()
    assert report["customer_id"] == cid

    resp = await http_client.get(f"/inspections/{iid}", headers=as_user(cid))
    final = resp.json()
    assert final["status"] == "завершена"
    assert final["report_id"] == report["id"]

    resp = await http_client.post(f"/reports/{report['id']}/lock", headers=as_user(INSPECTOR))
    assert resp.json()["locked"] is True

    text = (await http_client.get(f"/reports/{report['id']}/document", headers=as_user(cid))).text
    assert "Статус: не соответствует" in text
    assert "Статус проверки: выполняется" in text

    # Завершённую проверку нельзя отменить
    resp = await http_client.post(f"/inspections/{iid}/cancel", headers=as_user(SENIOR))
    assert resp.status_code == 409

    resp = await http_client.get("/inspections", params={"group": "completed"}, headers=as_user(cid))
    assert [i["id"] for i in resp.json()["items"]] == [iid]
