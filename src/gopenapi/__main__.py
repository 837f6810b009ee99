from gopenapi.cli import main

main()
