from typing import List

from crashify.core.email_service import EmailResult, OutgoingEmail
from crashify.core.security import create_access_token
from crashify.models import User

TEST_PASSWORD = "Passw0rd!"

SUBMISSION = {
    "company_name": "Allianz Australia",
    "your_name": "Sarah Lee",
    "your_email": "sarah.lee@allianz.com.au",
    "your_phone": "0298765432",
    "assessment_type": "Desktop Assessment",
    "claim_reference": "ALZ-55821",
    "incident_date": "2024-03-15",
    "make": "Mazda",
    "model": "CX-5",
    "year": 2021,
    "registration": "XYZ789",
    "odometer": 45210,
    "owner_info": {"firstName": "Ben", "lastName": "Carter", "email": "ben.carter@example.com"},
    "damage_areas": ["Front bumper", "Bonnet"],
    "authority_confirmed": True,
    "privacy_consent": True,
}


class FakeMailer:
    """Records outgoing mail instead of calling Resend."""

    def __init__(self):
        self.sent: List[OutgoingEmail] = []
        self.fail_for = set()

    async def send(self, email: OutgoingEmail) -> EmailResult:
        if email.to in self.fail_for:
            return EmailResult(success=False, error="Mailbox unavailable")
        self.sent.append(email)
        return EmailResult(success=True, message_id=f"msg_{len(self.sent)}")


def token_for(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}
