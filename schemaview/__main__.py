from schemaview.main import run

run()
