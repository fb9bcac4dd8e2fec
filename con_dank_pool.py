I = importlib

# Pool parameters. Amounts are integer base units (18 decimals).
UNIT = 10 ** 18
REWARD_TOTAL = 105172500000 * UNIT
SCALE = 10 ** 18
MIN_ALLOCATION = UNIT
MIN_STAKE = UNIT // 100
MAX_STAKE = 5 * UNIT
FEE_BPS = 100
BPS_DENOMINATOR = 10000

# Durations in seconds
POOL_DURATION = 5 * 24 * 60 * 60
END_BUFFER = 5 * 60
DEPOSIT_COOLDOWN = 60 * 60
RECOVERY_DELAY = 30 * 24 * 60 * 60

ADMIN_ROLE = 'admin'
PAUSER_ROLE = 'pauser'
ROLES = [ADMIN_ROLE, PAUSER_ROLE]

metadata = Hash()
roles = Hash(default_value=False)
stakes = Hash() # {"amount", "has_staked", "has_claimed", "first_deposit_time", "last_deposit_time", ...}

initialized = Variable(default_value=False)
paused = Variable(default_value=False)
start_time = Variable()
end_time = Variable()
total_deposited = Variable(default_value=0) # Gross sum of accepted deposits, never decreased
total_outstanding = Variable(default_value=0) # Base currency still owed to participants

reentrancyGuardActive = Variable(default_value=False)

# Standard XSC001 (Fungible Token) interface
token_interface = [
    I.Func('transfer_from', args=('amount', 'to', 'main_account')),
    I.Func('transfer', args=('amount', 'to')),
    I.Func('balance_of', args=('address',)),
]

# Events
PoolInitialized = LogEvent(
    event="pool_initialized",
    params={
        "initializer": {'type': str, 'idx': True},
        "start_time": {'type': str, 'idx': False},
        "end_time": {'type': str, 'idx': False},
        "reward_total": {'type': (int, float, decimal)}
    })

Deposit = LogEvent(
    event="deposit",
    params={
        "participant": {'type': str, 'idx': True},
        "amount": {'type': (int, float, decimal)},
        "participant_total": {'type': (int, float, decimal)},
        "total_deposited": {'type': (int, float, decimal)},
        "timestamp": {'type': str, 'idx': False}
    })

Claim = LogEvent(
    event="claim",
    params={
        "participant": {'type': str, 'idx': True},
        "refund": {'type': (int, float, decimal)},
        "fee": {'type': (int, float, decimal)},
        "token_amount": {'type': (int, float, decimal)},
        "timestamp": {'type': str, 'idx': False}
    })

EmergencyWithdrawal = LogEvent(
    event="emergency_withdrawal",
    params={
        "participant": {'type': str, 'idx': True},
        "amount": {'type': (int, float, decimal)},
        "timestamp": {'type': str, 'idx': False}
    })

Paused = LogEvent(
    event="paused",
    params={
        "account": {'type': str, 'idx': True},
        "timestamp": {'type': str, 'idx': False}
    })

Unpaused = LogEvent(
    event="unpaused",
    params={
        "account": {'type': str, 'idx': True},
        "timestamp": {'type': str, 'idx': False}
    })

AssetRecovered = LogEvent(
    event="asset_recovered",
    params={
        "asset": {'type': str, 'idx': True},
        "recipient": {'type': str, 'idx': False},
        "amount": {'type': (int, float, decimal)},
        "timestamp": {'type': str, 'idx': False}
    })

RoleGranted = LogEvent(
    event="role_granted",
    params={
        "role": {'type': str, 'idx': True},
        "account": {'type': str, 'idx': True},
        "sender": {'type': str, 'idx': False}
    })

RoleRevoked = LogEvent(
    event="role_revoked",
    params={
        "role": {'type': str, 'idx': True},
        "account": {'type': str, 'idx': True},
        "sender": {'type': str, 'idx': False}
    })

@construct
def seed(reward_token: str, currency: str, fee_recipient: str):
    assert reward_token and currency and fee_recipient, 'InvalidAddress: reward_token, currency and fee_recipient are required.'
    assert reward_token != currency, 'InvalidAddress: reward token and currency must be different contracts.'
    assert fee_recipient != ctx.this, 'InvalidAddress: fee recipient cannot be the pool itself.'

    assert I.enforce_interface(I.import_module(reward_token), token_interface), \
        'InvalidAddress: reward_token contract not XSC001-compliant'
    assert I.enforce_interface(I.import_module(currency), token_interface), \
        'InvalidAddress: currency contract not XSC001-compliant'

    metadata['reward_token'] = reward_token
    metadata['currency'] = currency
    metadata['fee_recipient'] = fee_recipient
    metadata['deployer'] = ctx.caller

    roles[ADMIN_ROLE, ctx.caller] = True
    roles[PAUSER_ROLE, ctx.caller] = True

    initialized.set(False)
    paused.set(False)
    total_deposited.set(0)
    total_outstanding.set(0)
    reentrancyGuardActive.set(False)

# --- Guards ---

def require_role(role: str):
    assert roles[role, ctx.caller], f"Unauthorized: {ctx.caller} lacks the '{role}' role."

def enter():
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, re-entrant call rejected."
    reentrancyGuardActive.set(True)

def leave():
    reentrancyGuardActive.set(False)

# --- Arithmetic ---

def compute_share(amount: int, total: int):
    if amount <= 0 or total <= 0:
        return 0

    scaled = REWARD_TOTAL * SCALE * amount // total
    base = scaled // SCALE
    # Remainder pass is below one unit before flooring, so the result is exactly
    # floor(REWARD_TOTAL * amount / total).
    remainder = scaled % SCALE
    base += remainder * amount // (total * SCALE)

    if base < MIN_ALLOCATION:
        return 0
    return base

def compute_fee(amount: int):
    # Exact floor(amount * FEE_BPS / BPS_DENOMINATOR); the SCALE factors cancel.
    assert amount >= 0, f'InvalidAmount: amount must be non-negative, got {amount}.'
    return amount * SCALE * FEE_BPS // BPS_DENOMINATOR // SCALE

# --- Custody helpers ---

def balance_here(token_name: str):
    balance = I.import_module(token_name).balance_of(address=ctx.this)
    if balance is None:
        return 0
    return balance

def send(token_name: str, amount: int, to: str):
    if amount <= 0:
        return

    balance_before = balance_here(token_name)
    I.import_module(token_name).transfer(amount=amount, to=to)
    balance_after = balance_here(token_name)

    assert balance_before - balance_after == amount, \
        f'TransferFailed: expected {amount} of {token_name} to leave the pool, {balance_before - balance_after} did.'

def phase():
    if not initialized.get():
        return 'UNINITIALIZED'
    if paused.get():
        return 'EMERGENCY_ONLY'
    if now + datetime.SECONDS * END_BUFFER <= end_time.get():
        return 'OPEN'
    if now <= end_time.get():
        return 'CLOSING'
    if now > end_time.get() + datetime.SECONDS * RECOVERY_DELAY:
        return 'RECOVERABLE'
    return 'CLAIMABLE'

# --- Lifecycle ---

@export
def initialize_pool():
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, please try again."
    require_role(ADMIN_ROLE)
    assert not initialized.get(), 'InvalidState: pool already initialized.'

    funded = balance_here(metadata['reward_token'])
    assert funded >= REWARD_TOTAL, \
        f'InvalidState: pool holds {funded} reward tokens, {REWARD_TOTAL} required.'

    start_time.set(now)
    end_time.set(now + datetime.SECONDS * POOL_DURATION)
    initialized.set(True)

    PoolInitialized({
        "initializer": ctx.caller,
        "start_time": str(start_time.get()),
        "end_time": str(end_time.get()),
        "reward_total": REWARD_TOTAL
    })

@export
def pause():
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, please try again."
    require_role(PAUSER_ROLE)
    assert not paused.get(), 'InvalidState: pool already paused.'
    paused.set(True)
    Paused({"account": ctx.caller, "timestamp": str(now)})

@export
def unpause():
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, please try again."
    require_role(PAUSER_ROLE)
    assert paused.get(), 'InvalidState: pool is not paused.'
    paused.set(False)
    Unpaused({"account": ctx.caller, "timestamp": str(now)})

@export
def grant_role(role: str, account: str):
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, please try again."
    require_role(ADMIN_ROLE)
    assert role in ROLES, f'InvalidState: unknown role {role}.'
    assert account, 'InvalidAddress: account is required.'
    roles[role, account] = True
    RoleGranted({"role": role, "account": account, "sender": ctx.caller})

@export
def revoke_role(role: str, account: str):
    assert not reentrancyGuardActive.get(), "InvalidState: pool is busy, please try again."
    require_role(ADMIN_ROLE)
    assert role in ROLES, f'InvalidState: unknown role {role}.'
    roles[role, account] = False
    RoleRevoked({"role": role, "account": account, "sender": ctx.caller})

# --- Stake ledger ---

@export
def deposit(amount: int):
    enter()

    assert not paused.get(), 'InvalidState: pool is paused.'
    assert initialized.get(), 'InvalidState: pool not initialized.'
    assert now >= start_time.get(), 'InvalidState: deposit window not open yet.'
    assert now + datetime.SECONDS * END_BUFFER <= end_time.get(), 'InvalidState: deposit window closed.'
    assert amount >= MIN_STAKE, f'InvalidAmount: deposit {amount} below minimum {MIN_STAKE}.'

    record = stakes[ctx.caller]
    if record is None:
        record = {
            "amount": 0,
            "has_staked": False,
            "has_claimed": False,
            "first_deposit_time": now,
            "last_deposit_time": None
        }

    assert not record["has_claimed"], 'StakingError: stake already settled.'
    if record["has_staked"]:
        assert now >= record["last_deposit_time"] + datetime.SECONDS * DEPOSIT_COOLDOWN, \
            'StakingError: deposit cooldown has not elapsed.'

    new_amount = record["amount"] + amount
    assert new_amount <= MAX_STAKE, \
        f'InvalidAmount: stake {new_amount} would exceed per-wallet cap {MAX_STAKE}.'

    # --- EFFECTS ---
    record["amount"] = new_amount
    record["has_staked"] = True
    record["last_deposit_time"] = now
    stakes[ctx.caller] = record

    total_deposited.set(total_deposited.get() + amount)
    total_outstanding.set(total_outstanding.get() + amount)

    # --- INTERACTION ---
    currency = metadata['currency']
    balance_before = balance_here(currency)
    I.import_module(currency).transfer_from(amount=amount, to=ctx.this, main_account=ctx.caller)
    received = balance_here(currency) - balance_before
    assert received == amount, f'TransferFailed: expected {amount} deposited, pool received {received}.'

    Deposit({
        "participant": ctx.caller,
        "amount": amount,
        "participant_total": new_amount,
        "total_deposited": total_deposited.get(),
        "timestamp": str(now)
    })

    leave()

# --- Allocation ---

@export
def share_of(amount: int, total: int):
    return compute_share(amount, total)

@export
def allocation_for(participant: str):
    record = stakes[participant]
    if record is None or not record["has_staked"]:
        return 0
    return compute_share(record["amount"], total_deposited.get())

@export
def fee_for(amount: int):
    return compute_fee(amount)

@export
def refund_for(amount: int):
    return amount - compute_fee(amount)

# --- Custody ---

@export
def claim():
    enter()

    assert initialized.get(), 'InvalidState: pool not initialized.'
    assert not paused.get(), 'InvalidState: pool is paused, use emergency_withdraw.'
    assert now > end_time.get(), 'InvalidState: claim period has not started.'

    record = stakes[ctx.caller]
    assert record and record["has_staked"], 'ClaimError: no stake to claim.'
    assert not record["has_claimed"], 'ClaimError: already claimed.'
    assert record["amount"] > 0, 'ClaimError: stake is empty.'

    amount = record["amount"]
    token_allocation = compute_share(amount, total_deposited.get())
    assert token_allocation >= MIN_ALLOCATION, \
        f'ClaimError: allocation {token_allocation} below minimum {MIN_ALLOCATION}.'

    reward_token = metadata['reward_token']
    assert balance_here(reward_token) >= token_allocation, \
        'ClaimError: pool holds insufficient reward tokens.'

    fee = compute_fee(amount)
    refund = amount - fee

    # --- EFFECTS ---
    record["has_claimed"] = True
    record["amount"] = 0
    record["refunded"] = refund
    record["tokens_claimed"] = token_allocation
    stakes[ctx.caller] = record
    total_outstanding.set(total_outstanding.get() - amount)

    # --- INTERACTIONS ---
    currency = metadata['currency']
    send(currency, fee, metadata['fee_recipient'])
    send(currency, refund, ctx.caller)
    send(reward_token, token_allocation, ctx.caller)

    Claim({
        "participant": ctx.caller,
        "refund": refund,
        "fee": fee,
        "token_amount": token_allocation,
        "timestamp": str(now)
    })

    leave()

@export
def emergency_withdraw():
    enter()

    assert paused.get(), 'InvalidState: emergency withdrawal requires the pool to be paused.'

    record = stakes[ctx.caller]
    assert record and record["has_staked"], 'ClaimError: no stake to withdraw.'
    assert not record["has_claimed"], 'ClaimError: already claimed.'
    assert record["amount"] > 0, 'ClaimError: stake is empty.'

    amount = record["amount"]

    # --- EFFECTS ---
    record["has_claimed"] = True
    record["amount"] = 0
    record["refunded"] = amount
    record["tokens_claimed"] = 0
    stakes[ctx.caller] = record
    total_outstanding.set(total_outstanding.get() - amount)

    # --- INTERACTION ---
    send(metadata['currency'], amount, ctx.caller)

    EmergencyWithdrawal({"participant": ctx.caller, "amount": amount, "timestamp": str(now)})

    leave()

@export
def recover_asset(asset: str, amount: int):
    enter()
    require_role(ADMIN_ROLE)
    assert amount > 0, f'InvalidAmount: recovery amount must be positive, got {amount}.'

    if asset == metadata['reward_token'] and initialized.get():
        assert now > end_time.get() + datetime.SECONDS * RECOVERY_DELAY, \
            'InvalidState: reward token locked until the recovery delay has elapsed.'

    if asset == metadata['currency']:
        surplus = balance_here(asset) - total_outstanding.get()
        assert amount <= surplus, \
            f'InvalidState: only {surplus} of {asset} is surplus to participant deposits.'

    send(asset, amount, ctx.caller)

    AssetRecovered({
        "asset": asset,
        "recipient": ctx.caller,
        "amount": amount,
        "timestamp": str(now)
    })

    leave()

# --- Helper/View functions ---

@export
def claim_preview(participant: str):
    record = stakes[participant]
    amount = 0
    has_claimed = False
    if record:
        amount = record["amount"]
        has_claimed = record["has_claimed"]

    allocation = compute_share(amount, total_deposited.get())
    fee = compute_fee(amount)

    return {
        "amount": amount,
        "allocation": allocation,
        "fee": fee,
        "refund": amount - fee,
        "has_claimed": has_claimed,
        "claimable": phase() in ['CLAIMABLE', 'RECOVERABLE'] and amount > 0 and not has_claimed \
            and allocation >= MIN_ALLOCATION
    }

@export
def get_phase():
    return phase()

@export
def has_role(role: str, account: str):
    return roles[role, account]

@export
def get_stake(account: str):
    return stakes[account]

@export
def get_pool_info():
    return {
        "reward_token": metadata['reward_token'],
        "currency": metadata['currency'],
        "fee_recipient": metadata['fee_recipient'],
        "initialized": initialized.get(),
        "paused": paused.get(),
        "start_time": start_time.get(),
        "end_time": end_time.get(),
        "total_deposited": total_deposited.get(),
        "total_outstanding": total_outstanding.get(),
        "phase": phase()
    }

@export
def get_parameters():
    return {
        "reward_total": REWARD_TOTAL,
        "scale": SCALE,
        "min_allocation": MIN_ALLOCATION,
        "min_stake": MIN_STAKE,
        "max_stake": MAX_STAKE,
        "fee_bps": FEE_BPS,
        "pool_duration": POOL_DURATION,
        "end_buffer": END_BUFFER,
        "deposit_cooldown": DEPOSIT_COOLDOWN,
        "recovery_delay": RECOVERY_DELAY
    }
