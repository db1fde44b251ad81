"""Verification services: code issuance and session redemption.

A game install asks for a short numeric code, the player types it into the
website, and redeeming it mints a player session. Routes call into these
functions with the request's database session.
"""
