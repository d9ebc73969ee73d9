from feedsearch.main import sync_main

sync_main()
