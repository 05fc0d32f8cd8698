"""Call-center recording scoring service."""
