from hostsedit.cli import main

main()
