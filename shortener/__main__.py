from shortener.app.main import main

main()
