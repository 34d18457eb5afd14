#!/usr/bin/env python

import asyncio
from pprint import pprint

from mtr_ext import MtrError, MtrExt, load_config, mtr

if __name__ == "__main__":
    # load configuration from file (default: ./mtr_ext.toml if present)
    config = load_config()

    # target IP
    ip = "8.8.8.8"

    # Synchronous helper, flattened dict
    print("mtr (helper)...")
    try:
        pprint(mtr(config, ip))
    except MtrError as e:
        print(f"failed: {e}")

    # Asynchronous API, several targets at once
    async def trace_all(targets):
        tasks = [
            MtrExt(t, config.mtr, binary=config.process.binary).start()
            for t in targets
        ]
        return await asyncio.gather(*tasks, return_exceptions=True)

    print("mtr (async)...")
    for result in asyncio.run(trace_all([ip, "1.1.1.1"])):
        if isinstance(result, MtrError):
            print(f"failed: {result}")
            if result.envelope is not None:
                print(result.envelope.raw)
        else:
            print(result)
