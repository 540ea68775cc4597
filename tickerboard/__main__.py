from tickerboard.app import main

main()
