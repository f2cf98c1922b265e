# Request dependencies shared by the routers, e.g.
# `from portal.deps.auth import get_server_session`.
