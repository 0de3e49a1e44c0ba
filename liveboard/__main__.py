from liveboard.main import run

run()
