from molgraph.cli import app

app()
