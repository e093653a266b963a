from relq.cli.app import main

main()
