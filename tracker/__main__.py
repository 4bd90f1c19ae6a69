from tracker.server import run

run()
