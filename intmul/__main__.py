from intmul.cli import main

main()
