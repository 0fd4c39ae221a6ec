from apekey.cli import main

main()
