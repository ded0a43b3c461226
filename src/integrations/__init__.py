"""Outbound collaborators: SMTP, Twilio dialing and media streams, Stripe payment links."""
