from .main import app


def main() -> None:
    app(prog_name="dwl-launcher")


if __name__ == "__main__":
    main()
