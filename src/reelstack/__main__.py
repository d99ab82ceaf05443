from reelstack.cli.main import main

main()
