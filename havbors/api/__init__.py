"""HTTP routers mounted by :mod:`havbors.main`."""
