from tandem.twin.main import run

if __name__ == "__main__":
    run()
