HOST = "localhost"
PORT = 8025
