"""Allow ``python -m toc_sim``."""

from toc_sim.run import main

if __name__ == "__main__":
    main()
