from relwatch.cli.app import main

main()
