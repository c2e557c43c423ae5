from depotflow.cli import main

main()
