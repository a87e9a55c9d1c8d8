from collab import setup

setup.run()

from collab.network.http.server import server as http_server  # noqa: E402

# Called from the process manager which actually boots the server
# e.g. uvicorn collab.network.http.launch:server
server = http_server
