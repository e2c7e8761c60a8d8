from typing import List

from crashify.console.api_client import AdminApiClient, ApiError
from crashify.console.toast import ToastCenter
from crashify.core.validation import is_valid_email


class ContactForm:
    """Website contact form poster."""

    def __init__(self, client: AdminApiClient, toasts: ToastCenter):
        self.client = client
        self.toasts = toasts
        self.first_name = ""
        self.last_name = ""
        self.email = ""
        self.message = ""
        self.busy = False
        self.sent = False

    def validation_errors(self) -> List[str]:
        errors = []
        if not self.first_name.strip() or not self.last_name.strip():
            errors.append("Please enter your full name")
        if not is_valid_email(self.email.strip()):
            errors.append("Please enter a valid email address")
        if not self.message.strip():
            errors.append("Please enter a message")
        return errors

    async def submit(self) -> bool:
        if self.busy:
            return False
        errors = self.validation_errors()
        if errors:
            self.toasts.error(errors[0])
            return False

        self.busy = True
        try:
            await self.client.send_contact({
                "FirstName": self.first_name.strip(),
                "LastName": self.last_name.strip(),
                "email": self.email.strip(),
                "message": self.message.strip(),
            })
        except ApiError as e:
            self.toasts.error(f"Failed to send message: {e.message}")
            return False
        finally:
            self.busy = False

        self.toasts.success("Thank you! Your message has been sent.")
        self.first_name = self.last_name = self.email = self.message = ""
        self.sent = True
        return True
