from image_cutter.app import main

main()
