from sfind.cli.main import app

app(prog_name="sfind")
