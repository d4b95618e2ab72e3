"""Exchange message formats, products, order books and internal updates."""