"""travelpay: booking payment service."""
