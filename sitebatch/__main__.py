from sitebatch.pipeline import main

main()
