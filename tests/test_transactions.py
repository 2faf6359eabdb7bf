import itertools

import pytest


@pytest.fixture
def seeded(client, make_student, make_event, make_transaction):
    """Three students, three events, a mix of methods and partial payments."""
    make_student("2021-0001", "Juan", "Dela Cruz")
    make_student("2022-0002", "Maria", "Santos")
    make_student("2023-0003", "Jose", "Reyes")
    intrams = make_event("Intramurals", "1st Semester", 100)
    founders = make_event("Foundation Day", "1st Semester", 250)
    fest = make_event("Sports Fest", "2nd Semester", 200)

    make_transaction("2021-0001", [intrams, founders], "Cash", date="2026-08-01")
    make_transaction("2021-0001", [fest], "GCash", date="2026-09-01", amountPaid=50)
    make_transaction("2022-0002", [intrams], "GCash", date="2026-08-15")
    make_transaction("2023-0003", [founders, fest], "Cash", date="2026-07-20", amountPaid=300)
    return {"intrams": intrams, "founders": founders, "fest": fest}


def test_empty_table_returns_empty_list(client):
    r = client.get("/api/transactions")
    assert r.status_code == 200
    assert r.json() == {"success": True, "transactions": []}


def test_total_is_sum_of_selected_events(client, make_student, make_event, make_transaction):
    make_student("2021-0001")
    a = make_event("Intramurals", "1st Semester", 100)
    b = make_event("Foundation Day", "1st Semester", 250)

    t = make_transaction("2021-0001", [a, b])
    assert t["totalAmount"] == 350
    assert t["status"] == "Paid"
    assert t["receiptNumber"].startswith("REC-")

    rows = client.get("/api/transactions", params={"studentID": "2021-0001"}).json()["transactions"]
    assert len(rows) == 1
    assert {e["title"] for e in rows[0]["events"]} == {"Intramurals", "Foundation Day"}
    assert rows[0]["eventsPaid"] == "Intramurals, Foundation Day"
    assert rows[0]["FirstName"] == "Juan"


def test_event_price_is_snapshotted(client, make_student, make_event, make_transaction):
    make_student()
    event_id = make_event(amount=100)
    t = make_transaction(events=[event_id])

    client.put(f"/api/events/{event_id}", json={"amount": 999})

    r = client.get(f"/api/transactions/{t['transactionID']}").json()["transaction"]
    assert r["totalAmount"] == 100
    assert r["events"][0]["amount"] == 100


def test_no_filters_returns_all_newest_first(client, seeded):
    rows = client.get("/api/transactions").json()["transactions"]
    assert [r["date"] for r in rows] == ["2026-09-01", "2026-08-15", "2026-08-01", "2026-07-20"]


def test_all_sentinel_means_no_constraint(client, seeded):
    everything = client.get("/api/transactions").json()["transactions"]
    r = client.get("/api/transactions", params={
        "studentID": "All", "eventID": "All", "paymentMethod": "All", "installmentStatus": "All",
    })
    assert r.json()["transactions"] == everything


def _matches(row, studentID, eventID, paymentMethod, installmentStatus):
    if studentID != "All" and row["IDnumber"] != studentID:
        return False
    if eventID != "All" and int(eventID) not in [e["eventID"] for e in row["events"]]:
        return False
    if paymentMethod != "All" and row["paymentMethod"] != paymentMethod:
        return False
    if installmentStatus != "All" and installmentStatus not in [i["status"] for i in row["installments"]]:
        return False
    return True


def test_filtered_results_are_subsets_satisfying_every_predicate(client, seeded):
    everything = client.get("/api/transactions").json()["transactions"]
    all_ids = {r["transactionID"] for r in everything}

    students = ["All", "2021-0001", "2022-0002", "9999-9999"]
    events = ["All", str(seeded["intrams"]), str(seeded["fest"]), "12345"]
    methods = ["All", "Cash", "GCash", "Cheque"]
    statuses = ["All", "Paid", "Pending"]

    for combo in itertools.product(students, events, methods, statuses):
        params = dict(zip(("studentID", "eventID", "paymentMethod", "installmentStatus"), combo))
        rows = client.get("/api/transactions", params=params).json()["transactions"]
        ids = {r["transactionID"] for r in rows}

        assert ids <= all_ids
        assert all(_matches(r, *combo) for r in rows)
        expected = {r["transactionID"] for r in everything if _matches(r, *combo)}
        assert ids == expected


def test_filter_by_event(client, seeded):
    rows = client.get("/api/transactions", params={"eventID": seeded["fest"]}).json()["transactions"]
    assert {r["IDnumber"] for r in rows} == {"2021-0001", "2023-0003"}


def test_filter_pending_installments(client, seeded):
    rows = client.get("/api/transactions", params={"installmentStatus": "Pending"}).json()["transactions"]
    assert len(rows) == 2
    assert all(r["status"] == "Partial" for r in rows)


def test_unmatched_filters_return_empty(client, seeded):
    for params in ({"studentID": "nobody"}, {"eventID": "abc"}, {"paymentMethod": "Bitcoin"}):
        r = client.get("/api/transactions", params=params)
        assert r.status_code == 200
        assert r.json()["transactions"] == []


def test_partial_payment_creates_installments(client, make_student, make_event, make_transaction):
    make_student()
    t = make_transaction(events=[make_event(amount=300)], amountPaid=120)

    assert t["status"] == "Partial"
    installments = sorted((i["status"], i["amount"]) for i in t["installments"])
    assert installments == [("Paid", 120), ("Pending", 180)]


def test_overpayment_rejected(client, make_student, make_event):
    make_student()
    event_id = make_event(amount=100)
    r = client.post("/api/transactions", json={
        "studentID": "2021-0001", "eventIDs": [event_id], "paymentMethod": "Cash", "amountPaid": 150,
    })
    assert r.status_code == 400


def test_unknown_student_is_not_found(client, make_event):
    event_id = make_event()
    r = client.post("/api/transactions", json={
        "studentID": "0000-0000", "eventIDs": [event_id], "paymentMethod": "Cash",
    })
    assert r.status_code == 404
    assert r.json()["error"] == "Student not found"
    assert client.get("/api/transactions").json()["transactions"] == []


def test_unknown_event_is_not_found(client, make_student, make_event):
    make_student()
    event_id = make_event()
    r = client.post("/api/transactions", json={
        "studentID": "2021-0001", "eventIDs": [event_id, 999], "paymentMethod": "Cash",
    })
    assert r.status_code == 404
    assert client.get("/api/transactions").json()["transactions"] == []


def test_no_events_selected(client, make_student):
    make_student()
    r = client.post("/api/transactions", json={"studentID": "2021-0001", "eventIDs": [], "paymentMethod": "Cash"})
    assert r.status_code == 400


def test_receipt_numbers_are_sequential_and_unique(client, make_student, make_event, make_transaction):
    make_student()
    event_id = make_event()
    first = make_transaction(events=[event_id])["receiptNumber"]
    second = make_transaction(events=[event_id])["receiptNumber"]
    assert first != second
    assert first.endswith("-0001")
    assert second.endswith("-0002")


def test_duplicate_receipt_number_is_conflict(client, make_student, make_event, make_transaction):
    make_student()
    event_id = make_event()
    make_transaction(events=[event_id], receiptNumber="OR-1001")
    r = client.post("/api/transactions", json={
        "studentID": "2021-0001", "eventIDs": [event_id], "paymentMethod": "Cash", "receiptNumber": "OR-1001",
    })
    assert r.status_code == 409


def test_receipt_view(client, make_student, make_event, make_transaction):
    make_student()
    t = make_transaction(events=[make_event(amount=350)], amountPaid=100)

    r = client.get(f"/api/transactions/{t['transactionID']}")
    assert r.status_code == 200
    receipt = r.json()["transaction"]
    assert receipt["amountPaid"] == 100
    assert receipt["balance"] == 250
    assert receipt["amountInWords"] == "Three Hundred Fifty Only"

    assert client.get("/api/transactions/999").status_code == 404


def test_update_transaction_replaces_events(client, make_student, make_event, make_transaction):
    make_student()
    a = make_event("Intramurals", "1st Semester", 100)
    b = make_event("Foundation Day", "1st Semester", 250)
    t = make_transaction(events=[a])

    r = client.put("/api/transactions", json={
        "transactionID": t["transactionID"], "eventIDs": [a, b], "paymentMethod": "GCash",
    })
    assert r.status_code == 200
    updated = r.json()["transaction"]
    assert updated["totalAmount"] == 350
    assert updated["paymentMethod"] == "GCash"
    assert len(updated["events"]) == 2
    # Only 100 was paid, the rest is now owed
    assert updated["status"] == "Partial"


def test_update_missing_transaction(client):
    r = client.put("/api/transactions", json={"transactionID": 404, "status": "Paid"})
    assert r.status_code == 404


def test_delete_transaction(client, make_student, make_event, make_transaction):
    make_student()
    t = make_transaction(events=[make_event()], amountPaid=50)

    r = client.delete("/api/transactions", params={"transactionID": t["transactionID"]})
    assert r.status_code == 200
    assert client.get("/api/transactions").json()["transactions"] == []
    assert client.get("/api/installments").json()["installments"] == []


def test_delete_missing_transaction_keeps_rows(client, make_student, make_event, make_transaction):
    make_student()
    make_transaction(events=[make_event()])

    r = client.delete("/api/transactions", params={"transactionID": 999})
    assert r.status_code == 404
    assert len(client.get("/api/transactions").json()["transactions"]) == 1


def test_delete_requires_transaction_id(client):
    assert client.delete("/api/transactions").status_code == 400


def test_history(client, seeded):
    rows = client.get("/api/history").json()["transactions"]
    assert len(rows) == 4
    assert rows[0]["eventsPaid"] == "Sports Fest"
    assert "installments" not in rows[0]


def test_row_student_id_feeds_back_into_filter(client, seeded):
    rows = client.get("/api/transactions").json()["transactions"]
    maria = [r for r in rows if r["FirstName"] == "Maria"][0]
    assert maria["studentID"] == "2022-0002"
    assert isinstance(maria["studentRecordID"], int)

    again = client.get("/api/transactions", params={"studentID": maria["studentID"]}).json()["transactions"]
    assert [r["transactionID"] for r in again] == [maria["transactionID"]]


def test_installment_status_filter_ignores_case(client, seeded):
    expected = client.get("/api/transactions", params={"installmentStatus": "Pending"}).json()["transactions"]
    assert len(expected) == 2
    for value in ("pending", "PENDING", " Pending "):
        rows = client.get("/api/transactions", params={"installmentStatus": value}).json()["transactions"]
        assert rows == expected


def test_update_rejects_blank_receipt_number(client, make_student, make_event, make_transaction):
    make_student()
    t = make_transaction(events=[make_event()], receiptNumber="OR-1001")

    r = client.put("/api/transactions", json={"transactionID": t["transactionID"], "receiptNumber": "   "})
    assert r.status_code == 400
    assert r.json()["success"] is False

    stored = client.get(f"/api/transactions/{t['transactionID']}").json()["transaction"]
    assert stored["receiptNumber"] == "OR-1001"


def test_receipt_prefix_comes_from_config(client, make_student, make_event, make_transaction, monkeypatch):
    from config import Config
    monkeypatch.setattr(Config, "RECEIPT_PREFIX", "OR")
    make_student()
    t = make_transaction(events=[make_event()])
    assert t["receiptNumber"].startswith("OR-")
    assert t["receiptNumber"].endswith("-0001")
