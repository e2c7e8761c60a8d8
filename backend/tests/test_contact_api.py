class TestContactForm:

    def test_forwards_message_to_inbox(self, client, fake_mailer):
        response = client.post("/api/sendEmail", json={
            "FirstName": "Alex",
            "LastName": "Nguyen",
            "email": "alex.nguyen@outlook.com",
            "message": "Do you cover regional NSW?\nThanks",
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Email sent successfully"}
        (email,) = fake_mailer.sent
        assert email.to == "info@crashify.com.au"
        assert email.reply_to == "alex.nguyen@outlook.com"
        assert email.subject == "New Contact Message from Alex Nguyen"
        assert "Do you cover regional NSW?<br>Thanks" in email.html

    def test_message_is_escaped(self, client, fake_mailer):
        client.post("/api/sendEmail", json={
            "FirstName": "Eve", "LastName": "X", "email": "eve.x@outlook.com", "message": "<script>alert(1)</script>",
        })
        assert "<script>" not in fake_mailer.sent[0].html

    def test_missing_fields(self, client, fake_mailer):
        response = client.post("/api/sendEmail", json={"FirstName": "Alex", "email": "alex.nguyen@outlook.com"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}
        assert fake_mailer.sent == []

    def test_provider_failure(self, client, fake_mailer):
        fake_mailer.fail_for.add("info@crashify.com.au")
        response = client.post("/api/sendEmail", json={
            "FirstName": "Alex", "LastName": "Nguyen", "email": "alex.nguyen@outlook.com", "message": "Hi",
        })
        assert response.status_code == 502
