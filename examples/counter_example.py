"""
PyStoreKit 範例：計數器，展示 reducer、中介軟體與狀態流的使用
"""

import logging

from pystorekit import (
    LoggerMiddleware,
    ThunkMiddleware,
    apply_middleware,
    combine_reducers,
    create_action,
    create_reducer,
    create_store,
    on,
)

# ============== 定義 Actions ==============
increment = create_action("[Counter] Increment")
decrement = create_action("[Counter] Decrement")
reset = create_action("[Counter] Reset", lambda value=0: value)
increment_by = create_action("[Counter] IncrementBy")

# ============== 定義 Reducer ==============
counter_reducer = create_reducer(
    0,
    on(increment, lambda state, action: state + 1),
    on(decrement, lambda state, action: state - 1),
    on(reset, lambda state, action: action.payload),
    on(increment_by, lambda state, action: state + action.payload),
)

history_reducer = create_reducer(
    (),
    on(increment_by, lambda state, action: state + (action.payload,)),
)

root_reducer = combine_reducers({"counter": counter_reducer, "history": history_reducer})


# ============== 定義 Thunk ==============
def increment_if_odd():
    def thunk(dispatch, get_state):
        if get_state()["counter"] % 2 == 1:
            dispatch(increment())
    return thunk


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store = create_store(root_reducer, apply_middleware(ThunkMiddleware, LoggerMiddleware()))

    store.select(lambda state: state["counter"]).subscribe(
        on_next=lambda count: print(f"計數: {count}")
    )

    store.dispatch(increment())
    store.dispatch(increment_by(5))
    store.dispatch(increment_if_odd())
    store.dispatch(decrement())
    store.dispatch(reset(10))

    print("\n==== 最終狀態 ====")
    print(store.get_state())
