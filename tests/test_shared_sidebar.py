from finance_tracker.shared_sidebar import pop_flash, push_flash


def test_flash_message_survives_until_read_once():
    state = {}
    push_flash("Transaction updated successfully!", state)
    assert pop_flash(state) == "Transaction updated successfully!"
    assert pop_flash(state) is None
