balances = Hash(default_value=0)
metadata = Hash()

@construct
def seed():
    initial_supply = 10 ** 30
    balances[ctx.caller] = initial_supply
    metadata['token_name'] = "POOL TOKEN"
    metadata['token_symbol'] = "PT"
    metadata['total_supply'] = initial_supply
    metadata['operator'] = ctx.caller

@export
def transfer(amount: int, to: str):
    assert amount > 0, 'Cannot transfer zero or negative!'
    sender = ctx.caller

    sender_bal = balances[sender]
    assert sender_bal >= amount, f'Transfer amount exceeds balance for sender {sender}!'

    balances[sender] = sender_bal - amount
    balances[to] += amount

@export
def approve(amount: int, to: str):
    assert amount >= 0, 'Cannot approve negative!'
    balances[ctx.caller, to] = amount

@export
def transfer_from(amount: int, to: str, main_account: str):
    assert amount > 0, 'Cannot transfer zero or negative!'
    spender = ctx.caller

    allowance = balances[main_account, spender]
    assert allowance >= amount, \
        f'Transfer amount {amount} exceeds allowance {allowance} for {main_account} by spender {spender}!'

    main_account_bal = balances[main_account]
    assert main_account_bal >= amount, f'Transfer amount {amount} exceeds balance {main_account_bal} for main_account {main_account}!'

    balances[main_account, spender] = allowance - amount
    balances[main_account] = main_account_bal - amount
    balances[to] += amount

@export
def balance_of(address: str):
    return balances[address]

@export
def allowance(owner: str, spender: str):
    return balances[owner, spender]
