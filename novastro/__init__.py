"""
Clients for the Novastro REST API.

Submodules:
    base: ``NovastroApi`` aiohttp session, ``ApiError`` and envelope helpers.
    auth: ``AuthClient`` nonce/signature login.
    properties: ``PropertyClient`` listing and three-step purchase protocol.
"""
