import json


def ndjson(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def test_health(api):
    assert api.get("/").json() == {"service": "kurd-med", "status": "ok"}


def test_identify_by_name(api, fake_client):
    resp = api.post("/identify/name", json={"name": "Paracetamol", "language": "en"})
    assert resp.status_code == 200

    body = resp.json()
    assert body["method"] == "name"
    assert body["record"]["name"] == "Paracetamol"
    assert body["record"]["sideEffects"] == []
    assert body["record"]["status"] == "identified"
    assert body["card"]["title"] == "Paracetamol"
    assert body["card"]["labels"]["uses"] == "Uses"
    assert "Paracetamol" in fake_client.calls[0]["messages"][1]["content"]


def test_identify_by_name_requires_a_name(api, fake_client):
    resp = api.post("/identify/name", json={"name": "   ", "language": "ku"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "تکایە ناوی دەرمانێک بنووسە."
    assert fake_client.calls == []


def test_identify_by_name_with_unsupported_language(api):
    resp = api.post("/identify/name", json={"name": "x", "language": "fr"})
    assert resp.status_code == 422


def test_identify_by_image(api, fake_client):
    resp = api.post(
        "/identify/image",
        files={"image": ("box.png", b"\x89PNG data", "image/png")},
        data={"language": "ku"},
    )
    assert resp.status_code == 200
    assert resp.json()["method"] == "packaging"
    assert resp.json()["record"]["name"] == "Paracetamol"

    call = fake_client.calls[0]
    parts = call["messages"][1]["content"]
    assert parts[0]["image_url"]["url"].startswith("data:image/png;base64,")
    # Default packaging prompt in the requested language.
    assert "قاپە" in parts[1]["text"]


def test_identify_by_image_rejects_missing_or_non_image(api, fake_client):
    assert api.post("/identify/image", data={"language": "en"}).status_code == 400

    resp = api.post(
        "/identify/image",
        files={"image": ("notes.txt", b"hello", "text/plain")},
        data={"language": "en"},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please select an image first."
    assert fake_client.calls == []


def test_unidentified_record_card(api, fake_client):
    fake_client.chat.completions.reply = json.dumps(
        {"name": "", "description": "Could not read the label.", "uses": [], "sideEffects": [], "disclaimer": "d"}
    )
    body = api.post("/identify/name", json={"name": "???"}).json()
    assert body["record"]["status"] == "unidentified"
    assert body["card"]["title"] == "Identification Failed"
    assert body["card"]["message"] == "Could not read the label."


def test_transport_error_card(api, fake_client):
    fake_client.chat.completions.error = TimeoutError("slow")
    body = api.post("/identify/name", json={"name": "Aspirin"}).json()
    assert body["record"]["status"] == "error"
    assert body["card"]["title"] == "Communication Error"
    assert "communicating with the AI" in body["card"]["message"]


def test_chat_flow(api):
    start = api.post("/chat/start", json={"language": "en"})
    assert start.status_code == 200
    session_id = start.headers["X-Session-Id"]
    assert start.json()["turns"][0]["sender"] == "model"

    resp = api.post(f"/chat/{session_id}/messages", json={"message": "hi", "language": "en"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/x-ndjson")
    assert ndjson(resp) == [
        {"type": "text", "content": "Hel"},
        {"type": "text", "content": "Hello"},
        {"type": "end"},
    ]

    transcript = api.get(f"/chat/{session_id}/messages").json()
    assert [(t["sender"], t["text"]) for t in transcript["turns"][1:]] == [("user", "hi"), ("model", "Hello")]
    assert transcript["language"] == "en"


def test_chat_stream_failure_sends_error_turn(api, fake_client):
    session_id = api.post("/chat/start", json={"language": "ku"}).headers["X-Session-Id"]
    fake_client.chat.completions.error = ConnectionError("offline")

    lines = ndjson(api.post(f"/chat/{session_id}/messages", json={"message": "سڵاو", "language": "ku"}))
    assert lines[0] == {"type": "text", "content": "ببورە، هەڵەیەک ڕوویدا. تکایە دووبارە هەوڵبدەرەوە."}
    assert lines[-1] == {"type": "end"}


def test_chat_unknown_session_and_blank_message(api):
    assert api.post("/chat/nope/messages", json={"message": "hi"}).status_code == 404
    assert api.get("/chat/nope/messages").status_code == 404

    session_id = api.post("/chat/start").headers["X-Session-Id"]
    assert api.post(f"/chat/{session_id}/messages", json={"message": "  "}).status_code == 400


def test_translations(api):
    body = api.get("/i18n/ku").json()
    assert body["direction"] == "rtl"
    assert body["translations"]["header.title"] == "کورد مێد"
    assert api.get("/i18n/de").status_code == 422


def test_preferences_round_trip(api):
    assert api.get("/preferences").json() == {"theme": "light", "language": "en", "onboardingComplete": False}

    resp = api.put("/preferences", json={"theme": "dark", "onboardingComplete": True})
    assert resp.json() == {"theme": "dark", "language": "en", "onboardingComplete": True}
    assert api.get("/preferences").json()["theme"] == "dark"

    assert api.put("/preferences", json={"theme": "neon"}).status_code == 422


def test_sign_in_popup_errors(api):
    closed = api.post("/auth/sign-in", json={"errorCode": "auth/popup-closed-by-user"})
    blocked = api.post("/auth/sign-in", json={"errorCode": "auth/popup-blocked"})
    other = api.post("/auth/sign-in", json={"errorCode": "auth/x", "errorMessage": "Something odd"})

    assert closed.status_code == blocked.status_code == other.status_code == 401
    assert closed.json()["detail"] == "Sign-in cancelled. Please try again."
    assert blocked.json()["detail"].startswith("Popup blocked by browser.")
    assert other.json()["detail"] == "Something odd"


def test_sign_in_me_sign_out(api):
    resp = api.post("/auth/sign-in", json={"idToken": "google-token"})
    assert resp.status_code == 200
    token = resp.json()["idToken"]
    assert resp.json()["user"]["displayName"] == "Rebin"
    assert "idToken" not in resp.json()["user"]

    headers = {"Authorization": f"Bearer {token}"}
    assert api.get("/auth/me", headers=headers).json()["uid"] == "u-1"

    api.put("/preferences", json={"language": "ku"}, headers=headers)
    assert api.get("/preferences", headers=headers).json()["language"] == "ku"
    assert api.get("/preferences").json()["language"] == "en"

    assert api.post("/auth/sign-out", headers=headers).status_code == 204
    assert api.get("/auth/me").status_code == 401


def test_sign_in_rejected_credential(api):
    resp = api.post("/auth/sign-in", json={"idToken": "bad"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_IDP_RESPONSE"


def test_unreadable_model_reply_card(api, fake_client):
    fake_client.chat.completions.reply = "Sorry, I think this is <garbled> model text"
    body = api.post("/identify/name", json={"name": "Aspirin"}).json()

    assert body["record"]["status"] == "error"
    assert body["record"]["rawText"] == "Sorry, I think this is <garbled> model text"
    assert body["card"]["title"] == "Identification Failed"
    assert body["card"]["message"] == "The AI returned an invalid format. Please try again."
