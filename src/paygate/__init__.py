"""Stripe checkout and webhook service."""
