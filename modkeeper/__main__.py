from modkeeper.cli import main

main(prog_name="modkeeper")
